import logging

import click

from foodbridge import app, db

logger = logging.getLogger(__name__)


def reset_database():
    db.session.commit()
    db.drop_all()
    db.create_all()
    logger.info('Database reset at %s', app.config['SQLALCHEMY_DATABASE_URI'])


@app.cli.command('init-db')
def init_db_command():
    """Create any missing tables."""
    db.create_all()
    click.echo('done')


@app.cli.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip the confirmation prompt.')
def reset_db_command(yes):
    """Drop every table and create them again."""
    if not yes:
        click.confirm('This deletes all data. Continue?', abort=True)
    reset_database()
    click.echo('done')


if __name__ == '__main__':
    app.run()
