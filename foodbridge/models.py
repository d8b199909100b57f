import enum
from datetime import datetime, timezone
from decimal import Decimal

from foodbridge import db


def utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


def isoformat(value):
    return value.isoformat() if value else None


def money(value):
    if value is None:
        return None
    return str(Decimal(value).quantize(Decimal('0.01')))


class UserType(enum.Enum):
    INDIVIDUAL = 'individual'
    DONOR_COMPANY = 'donor_company'
    RECIPIENT_COMPANY = 'recipient_company'
    ORGANIZER = 'organizer'


class CompanyType(enum.Enum):
    RESTAURANT = 'restaurant'
    GROCERY_STORE = 'grocery_store'
    ORGANIZATION = 'organization'


DONOR_COMPANY_TYPES = (CompanyType.RESTAURANT, CompanyType.GROCERY_STORE)


class ItemStatus(enum.Enum):
    ACTIVE = 'active'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'


class Urgency(enum.Enum):
    NORMAL = 'normal'
    HIGH = 'high'


class MatchStatus(enum.Enum):
    PENDING = 'pending'
    ACCEPTED = 'accepted'
    REJECTED = 'rejected'
    COMPLETED = 'completed'

    def can_transition_to(self, target):
        return target in MATCH_TRANSITIONS[self]


MATCH_TRANSITIONS = {
    MatchStatus.PENDING: {MatchStatus.ACCEPTED, MatchStatus.REJECTED},
    MatchStatus.ACCEPTED: {MatchStatus.COMPLETED},
    MatchStatus.REJECTED: set(),
    MatchStatus.COMPLETED: set(),
}


class CampaignStatus(enum.Enum):
    ACTIVE = 'active'
    CLOSED = 'closed'


class PledgeStatus(enum.Enum):
    PENDING = 'pending'
    COMPLETED = 'completed'


def enum_column(enum_cls, **kwargs):
    """String column holding the enum's values rather than member names."""
    column_type = db.Enum(enum_cls, native_enum=False, length=32,
                          values_callable=lambda e: [m.value for m in e])
    return db.Column(column_type, **kwargs)


class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False)
    password_hash = db.Column(db.String(60), nullable=False)
    full_name = db.Column(db.String(255), nullable=False)
    user_type = enum_column(UserType, nullable=False,
                            default=UserType.INDIVIDUAL)
    phone_number = db.Column(db.String(20))
    address = db.Column(db.Text)
    city = db.Column(db.String(100))
    state = db.Column(db.String(100))
    country = db.Column(db.String(100), default='Ethiopia')
    is_verified = db.Column(db.Boolean, default=False, nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow,
                           nullable=False)

    company = db.relationship('Company', backref='user', uselist=False,
                              cascade='all, delete-orphan')
    donations = db.relationship('Donation', backref='donor', lazy=True,
                                foreign_keys='Donation.donor_id',
                                cascade='all, delete-orphan')
    requests = db.relationship('DonationRequest', backref='requester',
                               lazy=True, cascade='all, delete-orphan')
    matches = db.relationship('Match', backref='user', lazy=True,
                              foreign_keys='Match.user_id',
                              cascade='all, delete-orphan')
    reviews = db.relationship('Review', backref='reviewer', lazy=True,
                              cascade='all, delete-orphan')
    campaigns = db.relationship('Campaign', backref='organizer', lazy=True,
                                cascade='all, delete-orphan')
    pledges = db.relationship('CampaignDonation', backref='donor', lazy=True,
                              cascade='all, delete-orphan')

    def to_dict(self):
        return {'id': self.id, 'email': self.email, 'name': self.full_name,
                'user_type': self.user_type.value,
                'phone_number': self.phone_number, 'address': self.address,
                'city': self.city, 'state': self.state,
                'country': self.country, 'is_verified': self.is_verified,
                'is_active': self.is_active,
                'company': self.company.to_dict() if self.company else None,
                'created_at': isoformat(self.created_at)}

    def summary(self):
        """Owner block embedded in browse and list results."""
        return {'id': self.id, 'name': self.full_name,
                'company': self.company.name if self.company else None}


class Company(db.Model):
    __tablename__ = 'companies'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer,
                        db.ForeignKey('users.id', ondelete='CASCADE'),
                        unique=True, nullable=False)
    name = db.Column(db.String(255), nullable=False)
    company_type = enum_column(CompanyType, nullable=False)
    category = db.Column(db.String(100))
    business_license = db.Column(db.String(100))
    tax_id = db.Column(db.String(100))
    description = db.Column(db.Text)
    website = db.Column(db.String(255))
    phone_number = db.Column(db.String(20))
    address = db.Column(db.Text, nullable=False)
    city = db.Column(db.String(100))
    is_verified = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow,
                           nullable=False)

    def to_dict(self):
        return {'id': self.id, 'name': self.name,
                'company_type': self.company_type.value,
                'category': self.category,
                'business_license': self.business_license,
                'tax_id': self.tax_id, 'address': self.address,
                'city': self.city, 'is_verified': self.is_verified}


class Donation(db.Model):
    __tablename__ = 'donations'

    id = db.Column(db.Integer, primary_key=True)
    donor_id = db.Column(db.Integer,
                         db.ForeignKey('users.id', ondelete='CASCADE'),
                         nullable=False, index=True)
    recipient_id = db.Column(db.Integer,
                             db.ForeignKey('users.id', ondelete='SET NULL'))
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, default='')
    category = db.Column(db.String(100), nullable=False)
    quantity = db.Column(db.Float, nullable=False)
    unit = db.Column(db.String(50), nullable=False)
    amount = db.Column(db.Numeric(12, 2))
    currency = db.Column(db.String(3), default='ETB')
    expiry_date = db.Column(db.DateTime)
    pickup_location = db.Column(db.Text, nullable=False)
    pickup_time = db.Column(db.DateTime)
    special_instructions = db.Column(db.Text, default='')
    status = enum_column(ItemStatus, nullable=False,
                         default=ItemStatus.ACTIVE)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow,
                           nullable=False)

    recipient = db.relationship('User', foreign_keys=[recipient_id])
    matches = db.relationship('Match', backref='donation', lazy=True,
                              cascade='all, delete-orphan',
                              passive_deletes=True)

    def to_dict(self):
        return {'id': self.id, 'donor_id': self.donor_id,
                'recipient_id': self.recipient_id, 'title': self.title,
                'description': self.description, 'category': self.category,
                'quantity': self.quantity, 'unit': self.unit,
                'amount': money(self.amount), 'currency': self.currency,
                'expiry_date': isoformat(self.expiry_date),
                'pickup_location': self.pickup_location,
                'pickup_time': isoformat(self.pickup_time),
                'special_instructions': self.special_instructions,
                'status': self.status.value,
                'created_at': isoformat(self.created_at),
                'updated_at': isoformat(self.updated_at)}


class DonationRequest(db.Model):
    __tablename__ = 'donation_requests'

    id = db.Column(db.Integer, primary_key=True)
    requester_id = db.Column(db.Integer,
                             db.ForeignKey('users.id', ondelete='CASCADE'),
                             nullable=False, index=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, default='')
    category = db.Column(db.String(100), nullable=False)
    quantity = db.Column(db.Float, nullable=False)
    unit = db.Column(db.String(50), nullable=False)
    urgency = enum_column(Urgency, nullable=False, default=Urgency.NORMAL)
    delivery_location = db.Column(db.Text, nullable=False)
    needed_by = db.Column(db.DateTime)
    special_requirements = db.Column(db.Text, default='')
    status = enum_column(ItemStatus, nullable=False,
                         default=ItemStatus.ACTIVE)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow,
                           nullable=False)

    matches = db.relationship('Match', backref='request', lazy=True,
                              cascade='all, delete-orphan',
                              passive_deletes=True)

    def to_dict(self):
        return {'id': self.id, 'requester_id': self.requester_id,
                'title': self.title, 'description': self.description,
                'category': self.category, 'quantity': self.quantity,
                'unit': self.unit, 'urgency': self.urgency.value,
                'delivery_location': self.delivery_location,
                'needed_by': isoformat(self.needed_by),
                'special_requirements': self.special_requirements,
                'status': self.status.value,
                'created_at': isoformat(self.created_at),
                'updated_at': isoformat(self.updated_at)}


class Match(db.Model):
    __tablename__ = 'donation_matches'
    __table_args__ = (
        db.CheckConstraint(
            '(donation_id IS NOT NULL AND request_id IS NULL) OR '
            '(donation_id IS NULL AND request_id IS NOT NULL)',
            name='chk_match_single_item'),
        db.UniqueConstraint('user_id', 'donation_id',
                            name='uq_match_user_donation'),
        db.UniqueConstraint('user_id', 'request_id',
                            name='uq_match_user_request'),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer,
                        db.ForeignKey('users.id', ondelete='CASCADE'),
                        nullable=False, index=True)
    donation_id = db.Column(db.Integer,
                            db.ForeignKey('donations.id', ondelete='CASCADE'))
    request_id = db.Column(db.Integer,
                           db.ForeignKey('donation_requests.id',
                                         ondelete='CASCADE'))
    responder_id = db.Column(db.Integer,
                             db.ForeignKey('users.id', ondelete='SET NULL'))
    status = enum_column(MatchStatus, nullable=False,
                         default=MatchStatus.PENDING)
    message = db.Column(db.Text, default='')
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow,
                           nullable=False)

    responder = db.relationship('User', foreign_keys=[responder_id])
    reviews = db.relationship('Review', backref='match', lazy=True,
                              cascade='all, delete-orphan',
                              passive_deletes=True)

    @property
    def item_owner_id(self):
        if self.donation is not None:
            return self.donation.donor_id
        if self.request is not None:
            return self.request.requester_id
        return None

    def participant_ids(self):
        ids = {self.user_id, self.responder_id, self.item_owner_id}
        ids.discard(None)
        return ids

    def to_dict(self, include_item=False):
        d = {'id': self.id, 'user_id': self.user_id,
             'donation_id': self.donation_id, 'request_id': self.request_id,
             'responder_id': self.responder_id, 'status': self.status.value,
             'message': self.message,
             'created_at': isoformat(self.created_at),
             'updated_at': isoformat(self.updated_at)}
        if include_item:
            d['donation'] = self.donation.to_dict() if self.donation else None
            d['request'] = self.request.to_dict() if self.request else None
        return d


class Review(db.Model):
    __tablename__ = 'donation_reviews'
    __table_args__ = (
        db.CheckConstraint('rating BETWEEN 1 AND 5', name='chk_review_rating'),
        db.UniqueConstraint('match_id', 'reviewer_id',
                            name='uq_review_match_reviewer'),
    )

    id = db.Column(db.Integer, primary_key=True)
    match_id = db.Column(db.Integer,
                         db.ForeignKey('donation_matches.id',
                                       ondelete='CASCADE'),
                         nullable=False)
    reviewer_id = db.Column(db.Integer,
                            db.ForeignKey('users.id', ondelete='CASCADE'),
                            nullable=False)
    rating = db.Column(db.Integer, nullable=False)
    comment = db.Column(db.Text, default='')
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def to_dict(self):
        return {'id': self.id, 'match_id': self.match_id,
                'reviewer_id': self.reviewer_id, 'rating': self.rating,
                'comment': self.comment,
                'created_at': isoformat(self.created_at)}


class Campaign(db.Model):
    __tablename__ = 'campaigns'

    id = db.Column(db.Integer, primary_key=True)
    organizer_id = db.Column(db.Integer,
                             db.ForeignKey('users.id', ondelete='CASCADE'),
                             nullable=False, index=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False)
    goal = db.Column(db.Numeric(12, 2), nullable=False)
    currency = db.Column(db.String(3), default='ETB', nullable=False)
    raised = db.Column(db.Numeric(12, 2), default=Decimal('0.00'),
                       nullable=False)
    category = db.Column(db.String(100), nullable=False)
    target_location = db.Column(db.Text, default='')
    image_url = db.Column(db.Text, default='')
    start_date = db.Column(db.DateTime, nullable=False)
    end_date = db.Column(db.DateTime)
    status = enum_column(CampaignStatus, nullable=False,
                         default=CampaignStatus.ACTIVE)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow,
                           nullable=False)

    pledges = db.relationship('CampaignDonation', backref='campaign',
                              lazy=True, cascade='all, delete-orphan',
                              passive_deletes=True)

    def to_dict(self):
        return {'id': self.id, 'organizer_id': self.organizer_id,
                'title': self.title, 'description': self.description,
                'goal': money(self.goal), 'raised': money(self.raised),
                'currency': self.currency, 'category': self.category,
                'target_location': self.target_location,
                'image_url': self.image_url,
                'start_date': isoformat(self.start_date),
                'end_date': isoformat(self.end_date),
                'status': self.status.value,
                'created_at': isoformat(self.created_at)}


class CampaignDonation(db.Model):
    __tablename__ = 'campaign_donations'
    __table_args__ = (
        db.CheckConstraint('amount > 0', name='chk_pledge_amount'),
    )

    id = db.Column(db.Integer, primary_key=True)
    campaign_id = db.Column(db.Integer,
                            db.ForeignKey('campaigns.id', ondelete='CASCADE'),
                            nullable=False, index=True)
    donor_id = db.Column(db.Integer,
                         db.ForeignKey('users.id', ondelete='CASCADE'),
                         nullable=False)
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    currency = db.Column(db.String(3), default='ETB', nullable=False)
    message = db.Column(db.Text, default='')
    is_anonymous = db.Column(db.Boolean, default=False, nullable=False)
    status = enum_column(PledgeStatus, nullable=False,
                         default=PledgeStatus.COMPLETED)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def to_dict(self):
        return {'id': self.id, 'campaign_id': self.campaign_id,
                'donor_id': None if self.is_anonymous else self.donor_id,
                'amount': money(self.amount), 'currency': self.currency,
                'message': self.message, 'is_anonymous': self.is_anonymous,
                'status': self.status.value,
                'created_at': isoformat(self.created_at)}
