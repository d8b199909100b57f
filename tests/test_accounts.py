import jwt

from conftest import PASSWORD


def test_home(client):
    response = client.get('/')

    assert response.status_code == 200
    assert response.get_json()['success'] is True


def test_register_individual(client):
    response = client.post('/auth/register', json={
        'name': 'Dawit Alemu', 'email': 'Dawit@Example.com',
        'password': PASSWORD})

    assert response.status_code == 201
    data = response.get_json()
    assert data['success'] is True
    assert data['user']['email'] == 'dawit@example.com'
    assert data['user']['user_type'] == 'individual'
    assert data['user']['country'] == 'Ethiopia'
    assert data['user']['company'] is None
    assert 'password_hash' not in data['user']
    assert data['token']


def test_register_restaurant_creates_company(restaurant):
    company = restaurant.user['company']

    assert restaurant.user['user_type'] == 'donor_company'
    assert company['name'] == 'Bole Pizza'
    assert company['company_type'] == 'restaurant'


def test_register_charity_is_organization(charity):
    assert charity.user['company']['company_type'] == 'organization'


def test_register_donor_company_needs_food_business_type(client):
    response = client.post('/auth/register', json={
        'name': 'Abebe Kebede', 'email': 'chef@example.com',
        'password': PASSWORD, 'user_type': 'donor_company',
        'company_name': 'Bole Pizza', 'company_type': 'organization',
        'address': 'Bole Road'})

    assert response.status_code == 400
    assert 'company_type' in response.get_json()['errors']


def test_register_validation_errors(client):
    response = client.post('/auth/register', json={
        'name': 'A', 'email': 'not-an-email', 'password': 'short',
        'user_type': 'alien'})

    assert response.status_code == 400
    data = response.get_json()
    assert data['success'] is False
    assert set(data['errors']) == {'name', 'email', 'password', 'user_type'}


def test_register_rejects_non_json(client):
    response = client.post('/auth/register', data='name=x',
                           content_type='application/x-www-form-urlencoded')

    assert response.status_code == 400
    assert response.get_json()['message'] == 'not json'


def test_register_duplicate_email(client, individual):
    response = client.post('/auth/register', json={
        'name': 'Someone Else', 'email': 'DAWIT@example.com',
        'password': PASSWORD})

    assert response.status_code == 409
    assert 'already exists' in response.get_json()['message']


def test_login_success(client, individual):
    response = client.post('/auth/login', json={
        'email': 'dawit@example.com', 'password': PASSWORD})

    assert response.status_code == 200
    data = response.get_json()
    assert data['user']['id'] == individual.user['id']
    payload = jwt.decode(data['token'], 'test-secret-key-for-testing-only',
                         algorithms=['HS256'])
    assert payload['user_id'] == individual.user['id']
    assert payload['user_type'] == 'individual'


def test_login_wrong_password(client, individual):
    response = client.post('/auth/login', json={
        'email': 'dawit@example.com', 'password': 'wrongpassword'})

    assert response.status_code == 401
    assert response.get_json()['message'] == 'Invalid email or password'


def test_login_missing_fields(client):
    response = client.post('/auth/login', json={'email': 'dawit@example.com'})

    assert response.status_code == 400


def test_me_with_either_token_header(client, individual):
    bearer = client.get('/auth/me', headers=individual.headers)
    legacy = client.get('/auth/me',
                        headers={'x-access-token': individual.token})

    assert bearer.status_code == 200
    assert legacy.status_code == 200
    assert bearer.get_json()['user']['email'] == 'dawit@example.com'


def test_me_without_token(client):
    response = client.get('/auth/me')

    assert response.status_code == 401
    assert response.get_json() == {'success': False,
                                   'message': 'Token is missing'}


def test_me_with_bad_token(client):
    response = client.get('/auth/me',
                          headers={'Authorization': 'Bearer garbage'})

    assert response.status_code == 401
    assert response.get_json()['message'] == 'Token is invalid'


def test_deactivated_account_is_refused(app, client, individual):
    from foodbridge import db
    from foodbridge.models import User

    with app.app_context():
        user = db.session.get(User, individual.user['id'])
        user.is_active = False
        db.session.commit()

    response = client.get('/auth/me', headers=individual.headers)

    assert response.status_code == 401


def test_logout(client, individual):
    response = client.post('/auth/logout', headers=individual.headers)

    assert response.status_code == 200


def test_categories(client):
    everything = client.get('/categories').get_json()
    business = client.get('/categories?type=business').get_json()

    assert {'business', 'charity', 'donation'} <= set(everything)
    assert 'Bakery' in business['categories']


def test_dashboard_stats_for_restaurant(client, restaurant):
    client.post('/donations', headers=restaurant.headers, json={
        'title': 'Bread', 'category': 'Bakery', 'quantity': 20,
        'unit': 'loaves', 'pickup_location': 'Bole'})

    response = client.get('/dashboard/stats', headers=restaurant.headers)

    stats = response.get_json()['stats']
    assert stats['user_type'] == 'business'
    assert stats['total_donations'] == 1
    assert stats['active_donations'] == 1
    assert stats['total_recipients'] == 0


def test_dashboard_stats_for_organizer(client, organizer):
    response = client.get('/dashboard/stats', headers=organizer.headers)

    stats = response.get_json()['stats']
    assert stats['user_type'] == 'organizer'
    assert stats['total_raised'] == '0.00'
