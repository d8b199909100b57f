"""Publishing and listing of donation offers and donation requests."""
import logging

from sqlalchemy.orm import joinedload

from foodbridge import db
from foodbridge.errors import PermissionDenied
from foodbridge.models import (Donation, DonationRequest, ItemStatus,
                               Urgency, User)
from foodbridge.store import commit, paginate
from foodbridge import validation

logger = logging.getLogger(__name__)


def _item_fields(data, errors, location_field):
    return {
        'title': validation.text(data, 'title', errors, required=True,
                                 max_length=255),
        'category': validation.text(data, 'category', errors, required=True,
                                    max_length=100),
        'quantity': validation.positive_float(data, 'quantity', errors,
                                              required=True),
        'unit': validation.text(data, 'unit', errors, required=True,
                                max_length=50),
        location_field: validation.text(data, location_field, errors,
                                        required=True),
        'description': validation.text(data, 'description', errors),
    }


def create_donation(actor, data):
    if not actor.is_donor_company:
        logger.warning('User %s is not a donor company, donation refused',
                       actor.user_id)
        raise PermissionDenied('Only businesses can create donations')

    errors = {}
    fields = _item_fields(data, errors, 'pickup_location')
    fields.update(
        amount=validation.positive_decimal(data, 'amount', errors),
        expiry_date=validation.timestamp(data, 'expiry_date', errors),
        pickup_time=validation.timestamp(data, 'pickup_time', errors),
        special_instructions=validation.text(data, 'special_instructions',
                                             errors))
    validation.raise_if(errors)

    donation = Donation(donor_id=actor.user_id, status=ItemStatus.ACTIVE,
                        **fields)
    db.session.add(donation)
    commit('Create donation')
    logger.info('Donation %s created by user %s', donation.id, actor.user_id)
    return donation


def create_request(actor, data):
    errors = {}
    fields = _item_fields(data, errors, 'delivery_location')
    fields.update(
        urgency=validation.choice(data.get('urgency'), Urgency, 'urgency',
                                  errors, default=Urgency.NORMAL),
        needed_by=validation.timestamp(data, 'needed_by', errors),
        special_requirements=validation.text(data, 'special_requirements',
                                             errors))
    validation.raise_if(errors)

    donation_request = DonationRequest(requester_id=actor.user_id,
                                       status=ItemStatus.ACTIVE, **fields)
    db.session.add(donation_request)
    commit('Create request')
    logger.info('Request %s created by user %s', donation_request.id,
                actor.user_id)
    return donation_request


def list_my_donations(actor, status, page, limit):
    query = Donation.query.filter(Donation.donor_id == actor.user_id)
    if status is not None:
        query = query.filter(Donation.status == status)
    query = query.order_by(Donation.created_at.desc(), Donation.id.desc())
    return paginate(query, page, limit, Donation.to_dict)


def list_my_requests(actor, status, page, limit):
    query = DonationRequest.query.filter(
        DonationRequest.requester_id == actor.user_id)
    if status is not None:
        query = query.filter(DonationRequest.status == status)
    query = query.order_by(DonationRequest.created_at.desc(),
                           DonationRequest.id.desc())
    return paginate(query, page, limit, DonationRequest.to_dict)


def browse_donations(page, limit, status=ItemStatus.ACTIVE, category=None,
                     location=None):
    query = Donation.query.options(
        joinedload(Donation.donor).joinedload(User.company))
    if status is not None:
        query = query.filter(Donation.status == status)
    if category:
        query = query.filter(Donation.category == category)
    if location:
        query = query.filter(
            Donation.pickup_location.icontains(location, autoescape=True))
    query = query.order_by(Donation.created_at.desc(), Donation.id.desc())

    def serialize(donation):
        d = donation.to_dict()
        d['donor'] = donation.donor.summary()
        return d

    return paginate(query, page, limit, serialize)


def browse_requests(page, limit, status=ItemStatus.ACTIVE, category=None,
                    location=None, urgency=None):
    query = DonationRequest.query.options(
        joinedload(DonationRequest.requester).joinedload(User.company))
    if status is not None:
        query = query.filter(DonationRequest.status == status)
    if category:
        query = query.filter(DonationRequest.category == category)
    if location:
        query = query.filter(DonationRequest.delivery_location.icontains(
            location, autoescape=True))
    if urgency is not None:
        query = query.filter(DonationRequest.urgency == urgency)
    query = query.order_by(DonationRequest.created_at.desc(),
                           DonationRequest.id.desc())

    def serialize(donation_request):
        d = donation_request.to_dict()
        d['requester'] = donation_request.requester.summary()
        return d

    return paginate(query, page, limit, serialize)
