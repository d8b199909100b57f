import logging

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from foodbridge import db
from foodbridge.errors import Conflict, Internal, ValidationError

logger = logging.getLogger(__name__)


def commit(context, conflict_message=None):
    """Commit the session, translating store failures into API errors.

    An ``IntegrityError`` becomes a ``Conflict`` when the caller expects one
    (a unique constraint guarding the operation); anything else the database
    raises is logged and surfaces as ``Internal``.
    """
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        if conflict_message:
            logger.warning('%s refused: %s', context, conflict_message)
            raise Conflict(conflict_message)
        logger.exception('%s failed on an integrity error', context)
        raise Internal()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception('%s failed', context)
        raise Internal()


def parse_page_args(args):
    errors = {}
    page = _positive_int(args.get('page'), 1, 'page', errors)
    limit = _positive_int(args.get('limit'),
                          current_app.config['DEFAULT_PAGE_SIZE'], 'limit',
                          errors)
    max_limit = current_app.config['MAX_PAGE_SIZE']
    if 'limit' not in errors and limit > max_limit:
        errors['limit'] = f'limit must be at most {max_limit}'
    if errors:
        raise ValidationError(errors=errors)
    return page, limit


def _positive_int(value, default, field, errors):
    if value is None or value == '':
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        errors[field] = f'{field} must be a positive integer'
        return None
    if number < 1:
        errors[field] = f'{field} must be a positive integer'
        return None
    return number


def paginate(query, page, limit, serialize):
    """Run ``query`` for one page and build the list response body."""
    pagination = query.paginate(page=page, per_page=limit, error_out=False,
                                count=True)
    return {'success': True,
            'items': [serialize(item) for item in pagination.items],
            'pagination': {'page': page, 'limit': limit,
                           'total': pagination.total,
                           'pages': pagination.pages}}
