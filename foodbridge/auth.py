import logging
from collections import namedtuple
from datetime import datetime, timedelta, timezone
from functools import wraps

import jwt
from flask import current_app, g, request

from foodbridge import db
from foodbridge.errors import Unauthorized
from foodbridge.models import DONOR_COMPANY_TYPES, CompanyType, User, UserType

logger = logging.getLogger(__name__)


class JWTAuthProvider():
    """Issues and verifies the bearer tokens identifying API callers."""

    algorithm = 'HS256'

    def issue(self, user):
        expires = timedelta(days=current_app.config['JWT_EXPIRES_DAYS'])
        payload = {'user_id': user.id, 'email': user.email,
                   'user_type': user.user_type.value,
                   'exp': datetime.now(timezone.utc) + expires}
        return jwt.encode(payload, current_app.config['SECRET_KEY'],
                          algorithm=self.algorithm)

    def verify(self, token):
        if not token:
            raise Unauthorized('Token is missing')
        try:
            data = jwt.decode(token, current_app.config['SECRET_KEY'],
                              algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            raise Unauthorized('Token has expired')
        except jwt.InvalidTokenError:
            raise Unauthorized('Token is invalid')
        user_id = data.get('user_id')
        if not isinstance(user_id, int):
            raise Unauthorized('Token is invalid')
        return user_id


auth_provider = JWTAuthProvider()


class Capabilities(namedtuple('Capabilities',
                              ['user_id', 'user_type', 'company_type'])):
    """What the authenticated caller may do, resolved once per request."""

    @property
    def is_donor_company(self):
        return self.company_type in DONOR_COMPANY_TYPES

    @property
    def is_recipient_company(self):
        return (self.user_type == UserType.RECIPIENT_COMPANY and
                self.company_type == CompanyType.ORGANIZATION)

    @property
    def is_organizer(self):
        return self.user_type == UserType.ORGANIZER


def actor_capabilities(user_id):
    user = db.session.get(User, user_id)
    if user is None or not user.is_active:
        logger.warning('Token presented for unknown or inactive user %s',
                       user_id)
        raise Unauthorized('Account not found or deactivated')
    company_type = user.company.company_type if user.company else None
    return Capabilities(user.id, user.user_type, company_type)


def request_token():
    token = request.headers.get('x-access-token')
    if token:
        return token
    header = request.headers.get('Authorization', '')
    if header.startswith('Bearer '):
        return header[len('Bearer '):].strip()
    return None


def token_required(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        user_id = auth_provider.verify(request_token())
        g.actor = actor_capabilities(user_id)
        return f(*args, **kwargs)

    return decorated
