import pytest
from sqlalchemy import text

from foodbridge import db
from foodbridge.models import (CampaignDonation, Company, Donation,
                               DonationRequest, Match, Review, User)
from test_campaigns import SCHOOL_MEALS
from test_registry import MEALS, PIZZA


@pytest.fixture
def exchange(client, restaurant, charity, organizer):
    """Restaurant and charity linked through every kind of record"""
    donation = client.post('/donations', headers=restaurant.headers,
                           json=PIZZA).get_json()['donation']
    on_donation = client.post('/matches', headers=charity.headers,
                              json={'donation_id': donation['id']}) \
        .get_json()['match']
    client.put(f"/matches/{on_donation['id']}/status",
               headers=restaurant.headers, json={'status': 'accepted'})
    client.post('/reviews', headers=charity.headers,
                json={'match_id': on_donation['id'], 'rating': 5})

    wanted = client.post('/requests', headers=charity.headers,
                         json=MEALS).get_json()['request']
    on_request = client.post('/matches', headers=restaurant.headers,
                             json={'request_id': wanted['id']}) \
        .get_json()['match']

    campaign = client.post('/campaigns', headers=organizer.headers,
                           json=SCHOOL_MEALS).get_json()['campaign']
    client.post('/campaigns/donate', headers=charity.headers,
                json={'campaign_id': campaign['id'], 'amount': 100})

    return {'donation': donation['id'], 'on_donation': on_donation['id'],
            'on_request': on_request['id'],
            'restaurant': restaurant.user['id'],
            'charity': charity.user['id']}


def delete_with_orm(model, pk):
    db.session.delete(db.session.get(model, pk))
    db.session.commit()


def delete_with_sql(model, pk):
    db.session.execute(text(f'DELETE FROM {model.__tablename__} '
                            'WHERE id = :id'), {'id': pk})
    db.session.commit()


def test_sqlite_enforces_foreign_keys(app):
    with app.app_context():
        assert db.session.execute(text('PRAGMA foreign_keys')).scalar() == 1


@pytest.mark.parametrize('delete', [delete_with_orm, delete_with_sql])
def test_deleting_donation_removes_its_matches(app, exchange, delete):
    with app.app_context():
        delete(Donation, exchange['donation'])

        assert db.session.get(Match, exchange['on_donation']) is None
        assert Review.query.count() == 0
        assert db.session.get(Match, exchange['on_request']) is not None


@pytest.mark.parametrize('delete', [delete_with_orm, delete_with_sql])
def test_deleting_user_removes_owned_records(app, exchange, delete):
    with app.app_context():
        delete(User, exchange['charity'])

        assert Company.query.filter_by(user_id=exchange['charity']).count() \
            == 0
        assert Company.query.filter_by(
            user_id=exchange['restaurant']).count() == 1
        assert DonationRequest.query.count() == 0
        assert Match.query.count() == 0
        assert Review.query.count() == 0
        assert CampaignDonation.query.count() == 0
        donation = db.session.get(Donation, exchange['donation'])
        assert donation is not None
        assert donation.recipient_id is None
