import logging
import re

from sqlalchemy import distinct, func

from foodbridge import bcrypt, db
from foodbridge.auth import auth_provider
from foodbridge.errors import Conflict, Unauthorized, ValidationError
from foodbridge.models import (DONOR_COMPANY_TYPES, Campaign, Company,
                               CompanyType, Donation, DonationRequest,
                               ItemStatus, Match, User, UserType, money)
from foodbridge.store import commit
from foodbridge import validation

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')

BUSINESS_CATEGORIES = ['Cooked Meals', 'Drinks', 'Dairy Products', 'Bakery',
                       'Fruits & Veggies']
CHARITY_CATEGORIES = ['Children Center', 'Elders Center',
                      'Special Needs Center', 'Food Bank']
DONATION_CATEGORIES = [
    {'id': 1, 'name': 'Food & Meals',
     'description': 'Cooked meals, ingredients, and food items'},
    {'id': 2, 'name': 'Drinks & Beverages',
     'description': 'Water, juices, soft drinks, and other beverages'},
    {'id': 3, 'name': 'Groceries & Essentials',
     'description': 'Packaged food, household items, and essentials'},
    {'id': 4, 'name': 'Financial Support',
     'description': 'Money donations for various causes'},
    {'id': 5, 'name': 'Emergency Relief',
     'description': 'Urgent donations for emergency situations'},
]


def register(data):
    errors = {}
    name = validation.text(data, 'name', errors, required=True, min_length=2,
                           max_length=100)
    email = validation.text(data, 'email', errors, required=True,
                            max_length=255)
    if email and not EMAIL_RE.match(email):
        errors['email'] = 'Please enter a valid email address'
    password = data.get('password')
    if not password or not isinstance(password, str):
        errors['password'] = 'password is required'
    elif not 8 <= len(password) <= 128:
        errors['password'] = 'password must be 8 to 128 characters long'
    user_type = validation.choice(data.get('user_type'), UserType,
                                  'user_type', errors,
                                  default=UserType.INDIVIDUAL)
    contact = {field: validation.text(data, field, errors)
               for field in ('phone_number', 'address', 'city', 'state',
                             'country')}
    company = _company_fields(data, user_type, errors)
    validation.raise_if(errors)

    email = email.lower()
    if User.query.filter_by(email=email).first():
        raise Conflict('User with this email already exists')

    contact['country'] = contact['country'] or 'Ethiopia'
    user = User(email=email, full_name=name, user_type=user_type,
                password_hash=bcrypt.generate_password_hash(
                    password).decode('utf-8'),
                **contact)
    if company is not None:
        user.company = Company(**company)
    db.session.add(user)
    commit('Registration', 'User with this email already exists')
    logger.info('Registered user %s as %s', user.id, user_type.value)
    return user, auth_provider.issue(user)


def _company_fields(data, user_type, errors):
    """Company record columns for business and organization accounts."""
    if user_type == UserType.DONOR_COMPANY:
        company_type = validation.choice(data.get('company_type'),
                                         CompanyType, 'company_type', errors)
        if company_type not in DONOR_COMPANY_TYPES:
            errors['company_type'] = ('Please select either restaurant or '
                                      'grocery_store')
    elif user_type == UserType.RECIPIENT_COMPANY:
        company_type = CompanyType.ORGANIZATION
    elif user_type == UserType.ORGANIZER and data.get('company_name'):
        company_type = CompanyType.ORGANIZATION
    else:
        return None

    name = validation.text(data, 'company_name', errors, required=True,
                           min_length=2, max_length=255)
    address = validation.text(data, 'address', errors, required=True)
    return {'name': name, 'company_type': company_type,
            'address': address,
            'category': validation.text(data, 'category', errors),
            'business_license': validation.text(data, 'business_license',
                                                errors),
            'tax_id': validation.text(data, 'tax_id', errors),
            'description': validation.text(data, 'description', errors),
            'website': validation.text(data, 'website', errors),
            'phone_number': validation.text(data, 'phone_number', errors),
            'city': validation.text(data, 'city', errors)}


def login(data):
    email = data.get('email')
    password = data.get('password')
    if not email or not password:
        raise ValidationError('Email and password are required')
    user = User.query.filter_by(email=str(email).strip().lower()).first()
    if user is None or not bcrypt.check_password_hash(user.password_hash,
                                                      str(password)):
        logger.warning('Failed login for %s', email)
        raise Unauthorized('Invalid email or password')
    if not user.is_active:
        raise Unauthorized('Account is deactivated. Please contact support.')
    return user, auth_provider.issue(user)


def profile(actor):
    return db.session.get(User, actor.user_id)


def categories(kind=None):
    if kind == 'business':
        return {'categories': BUSINESS_CATEGORIES}
    if kind == 'charity':
        return {'categories': CHARITY_CATEGORIES}
    if kind == 'donation':
        return {'categories': DONATION_CATEGORIES}
    return {'business': BUSINESS_CATEGORIES, 'charity': CHARITY_CATEGORIES,
            'donation': DONATION_CATEGORIES}


def dashboard_stats(actor):
    user_id = actor.user_id
    if actor.is_donor_company:
        donations = Donation.query.filter_by(donor_id=user_id)
        recipients = db.session.query(
            func.count(distinct(Donation.recipient_id))).filter(
                Donation.donor_id == user_id).scalar()
        return {
            'total_donations': donations.count(),
            'active_donations': donations.filter_by(
                status=ItemStatus.ACTIVE).count(),
            'completed_donations': donations.filter_by(
                status=ItemStatus.COMPLETED).count(),
            'total_recipients': recipients or 0,
            'user_type': 'business',
        }
    if actor.is_recipient_company:
        requests = DonationRequest.query.filter_by(requester_id=user_id)
        received = Match.query.join(
            DonationRequest, Match.request_id == DonationRequest.id).filter(
                DonationRequest.requester_id == user_id)
        return {
            'total_requests': requests.count(),
            'active_requests': requests.filter_by(
                status=ItemStatus.ACTIVE).count(),
            'completed_requests': requests.filter_by(
                status=ItemStatus.COMPLETED).count(),
            'matches_received': received.count(),
            'user_type': 'charity',
        }
    if actor.is_organizer:
        raised = db.session.query(func.sum(Campaign.raised)).filter(
            Campaign.organizer_id == user_id).scalar()
        return {
            'total_campaigns': Campaign.query.filter_by(
                organizer_id=user_id).count(),
            'total_raised': money(raised or 0),
            'total_matches': Match.query.filter_by(user_id=user_id).count(),
            'user_type': 'organizer',
        }
    return {
        'total_donations': Donation.query.filter_by(donor_id=user_id).count(),
        'total_requests': DonationRequest.query.filter_by(
            requester_id=user_id).count(),
        'total_matches': Match.query.filter_by(user_id=user_id).count(),
        'user_type': 'individual',
    }
