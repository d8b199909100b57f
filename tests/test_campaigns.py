from decimal import Decimal

import pytest

SCHOOL_MEALS = {'title': 'School Meals for Addis', 'category': 'Food & Meals',
                'description': 'Daily lunch for 200 pupils', 'goal': 50000,
                'start_date': '2026-10-01', 'end_date': '2026-12-31'}


@pytest.fixture
def campaign(client, organizer):
    response = client.post('/campaigns', headers=organizer.headers,
                           json=SCHOOL_MEALS)
    return response.get_json()['campaign']


def pledge(client, account, campaign_id, amount, **body):
    return client.post('/campaigns/donate', headers=account.headers,
                       json=dict(body, campaign_id=campaign_id, amount=amount))


def test_create_campaign(organizer, campaign):
    assert campaign['status'] == 'active'
    assert campaign['goal'] == '50000.00'
    assert campaign['raised'] == '0.00'
    assert campaign['currency'] == 'ETB'
    assert campaign['organizer_id'] == organizer.user['id']


def test_create_campaign_validation(client, organizer):
    response = client.post('/campaigns', headers=organizer.headers,
                           json=dict(SCHOOL_MEALS, goal=0,
                                     end_date='2026-09-01'))

    assert response.status_code == 400
    assert set(response.get_json()['errors']) == {'goal', 'end_date'}


def test_list_campaigns_is_public(client, campaign):
    response = client.get('/campaigns')

    assert response.status_code == 200
    data = response.get_json()
    assert data['pagination']['total'] == 1
    assert data['items'][0]['organizer']['name'] == 'Meron Haile'


@pytest.mark.parametrize('amount', [0, -5, 'abc', None])
def test_pledge_rejects_bad_amount(client, individual, campaign, amount):
    response = pledge(client, individual, campaign['id'], amount)

    assert response.status_code == 400
    assert 'amount' in response.get_json()['errors']


def test_pledge_raises_total(app, client, individual, campaign):
    from foodbridge import db
    from foodbridge.models import Campaign, CampaignDonation

    response = pledge(client, individual, campaign['id'], 1000,
                      message='For the kids')

    assert response.status_code == 201
    data = response.get_json()
    assert data['donation']['amount'] == '1000.00'
    assert data['donation']['status'] == 'completed'
    assert data['campaign']['raised'] == '1000.00'
    with app.app_context():
        stored = db.session.get(Campaign, campaign['id'])
        assert Decimal(stored.raised) == Decimal('1000')
        assert CampaignDonation.query.count() == 1


def test_pledges_accumulate(client, individual, charity, campaign):
    pledge(client, individual, campaign['id'], 1000)
    response = pledge(client, charity, campaign['id'], '250.50')

    assert response.get_json()['campaign']['raised'] == '1250.50'


def test_anonymous_pledge_hides_donor(client, individual, campaign):
    response = pledge(client, individual, campaign['id'], 10,
                      is_anonymous=True)

    assert response.get_json()['donation']['donor_id'] is None


def test_pledge_unknown_campaign(client, individual):
    response = pledge(client, individual, 404, 10)

    assert response.status_code == 404


def test_close_campaign(client, organizer, individual, campaign):
    outsider = client.put(f"/campaigns/{campaign['id']}/close",
                          headers=individual.headers)
    closed = client.put(f"/campaigns/{campaign['id']}/close",
                        headers=organizer.headers)
    again = client.put(f"/campaigns/{campaign['id']}/close",
                       headers=organizer.headers)
    late = pledge(client, individual, campaign['id'], 10)

    assert outsider.status_code == 403
    assert closed.status_code == 200
    assert closed.get_json()['campaign']['status'] == 'closed'
    assert again.status_code == 409
    assert late.status_code == 409


def test_list_campaigns_by_status(client, organizer, campaign):
    client.put(f"/campaigns/{campaign['id']}/close", headers=organizer.headers)

    active = client.get('/campaigns?status=active').get_json()
    closed = client.get('/campaigns?status=closed').get_json()

    assert active['pagination']['total'] == 0
    assert closed['pagination']['total'] == 1


def test_pledge_locks_campaign_row(monkeypatch, client, individual,
                                   campaign):
    from flask_sqlalchemy.query import Query

    from foodbridge.models import Campaign

    locked = []
    original = Query.with_for_update

    def spy(self, *args, **kwargs):
        locked.append(self.column_descriptions[0]['entity'])
        return original(self, *args, **kwargs)

    monkeypatch.setattr(Query, 'with_for_update', spy)

    response = pledge(client, individual, campaign['id'], 10)

    assert response.status_code == 201
    assert locked == [Campaign]
