"""
Match proposals between a user and a donation or request.

A match moves through ``pending -> accepted -> completed`` or
``pending -> rejected``. At most one match exists per (user, donation) and
per (user, request); the database's unique constraints decide that, so two
concurrent proposals cannot both be stored.
"""
import logging

from sqlalchemy.orm import joinedload

from foodbridge import db
from foodbridge.errors import Conflict, NotFound, ValidationError
from foodbridge.models import (Donation, DonationRequest, ItemStatus, Match,
                               MatchStatus)
from foodbridge.notifications import send_match_notification
from foodbridge.store import commit, paginate
from foodbridge import validation

logger = logging.getLogger(__name__)

TARGET_STATUSES = (MatchStatus.ACCEPTED, MatchStatus.REJECTED,
                   MatchStatus.COMPLETED)


def create_match(actor, data):
    errors = {}
    donation_id = validation.integer(data, 'donation_id', errors)
    request_id = validation.integer(data, 'request_id', errors)
    message = validation.text(data, 'message', errors)
    validation.raise_if(errors)
    if (donation_id is None) == (request_id is None):
        raise ValidationError(
            'Exactly one of donation_id or request_id is required')

    if donation_id is not None:
        if db.session.get(Donation, donation_id) is None:
            raise NotFound('Donation not found')
    elif db.session.get(DonationRequest, request_id) is None:
        raise NotFound('Request not found')

    match = Match(user_id=actor.user_id, donation_id=donation_id,
                  request_id=request_id, message=message or '',
                  status=MatchStatus.PENDING)
    db.session.add(match)
    commit('Create match', 'Match already exists')
    logger.info('Match %s proposed by user %s', match.id, actor.user_id)

    if match.item_owner_id != actor.user_id:
        send_match_notification(match)
    return match


def update_status(actor, match_id, data):
    errors = {}
    status = validation.choice(data.get('status'), MatchStatus, 'status',
                               errors)
    if status is None or status not in TARGET_STATUSES:
        raise ValidationError('Invalid status', {
            'status': 'status must be one of: accepted, rejected, completed'})
    message = validation.text(data, 'message', errors)
    validation.raise_if(errors)

    match = Match.query.filter_by(id=match_id).with_for_update().first()
    if match is None:
        raise NotFound('Match not found')
    if not match.status.can_transition_to(status):
        db.session.rollback()
        raise Conflict(f'Cannot move a {match.status.value} match to '
                       f'{status.value}')

    match.status = status
    if message:
        match.message = message
    if status in (MatchStatus.ACCEPTED, MatchStatus.REJECTED):
        match.responder_id = actor.user_id
    if status == MatchStatus.ACCEPTED and match.donation is not None:
        if match.user_id != match.donation.donor_id:
            match.donation.recipient_id = match.user_id
    if status == MatchStatus.COMPLETED:
        item = match.donation if match.donation is not None else match.request
        item.status = ItemStatus.COMPLETED

    commit('Update match status')
    logger.info('Match %s %s by user %s', match.id, status.value,
                actor.user_id)
    return match


def list_my_matches(actor, status, page, limit):
    query = Match.query.options(joinedload(Match.donation),
                                joinedload(Match.request)).filter(
        Match.user_id == actor.user_id)
    if status is not None:
        query = query.filter(Match.status == status)
    query = query.order_by(Match.created_at.desc(), Match.id.desc())
    return paginate(query, page, limit,
                    lambda match: match.to_dict(include_item=True))
