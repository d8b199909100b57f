"""Campaigns and the pledges made against them."""
import logging

from flask import current_app
from sqlalchemy.orm import joinedload

from foodbridge import db
from foodbridge.errors import Conflict, NotFound, PermissionDenied
from foodbridge.models import (Campaign, CampaignDonation, CampaignStatus,
                               PledgeStatus, User)
from foodbridge.store import commit, paginate
from foodbridge import validation

logger = logging.getLogger(__name__)


def create_campaign(actor, data):
    errors = {}
    title = validation.text(data, 'title', errors, required=True,
                            max_length=255)
    description = validation.text(data, 'description', errors, required=True)
    goal = validation.positive_decimal(data, 'goal', errors, required=True)
    category = validation.text(data, 'category', errors, required=True,
                               max_length=100)
    start_date = validation.timestamp(data, 'start_date', errors,
                                      required=True)
    end_date = validation.timestamp(data, 'end_date', errors)
    if start_date and end_date and end_date < start_date:
        errors['end_date'] = 'end_date must not be before start_date'
    currency = validation.text(data, 'currency', errors, max_length=3)
    target_location = validation.text(data, 'target_location', errors)
    image_url = validation.text(data, 'image_url', errors)
    validation.raise_if(errors)

    campaign = Campaign(
        organizer_id=actor.user_id, title=title, description=description,
        goal=goal, category=category, start_date=start_date,
        end_date=end_date, target_location=target_location,
        image_url=image_url, status=CampaignStatus.ACTIVE,
        currency=(currency or current_app.config['DEFAULT_CURRENCY']).upper())
    db.session.add(campaign)
    commit('Create campaign')
    logger.info('Campaign %s created by user %s', campaign.id, actor.user_id)
    return campaign


def list_campaigns(page, limit, status=None, category=None):
    query = Campaign.query.options(
        joinedload(Campaign.organizer).joinedload(User.company))
    if status is not None:
        query = query.filter(Campaign.status == status)
    if category:
        query = query.filter(Campaign.category == category)
    query = query.order_by(Campaign.created_at.desc(), Campaign.id.desc())

    def serialize(campaign):
        d = campaign.to_dict()
        d['organizer'] = campaign.organizer.summary()
        return d

    return paginate(query, page, limit, serialize)


def pledge(actor, data):
    """Record a settled pledge and add it to the campaign's raised total.

    The insert and the ``raised = raised + amount`` update are committed
    together, so concurrent pledges never lose an increment.
    """
    errors = {}
    campaign_id = validation.integer(data, 'campaign_id', errors,
                                     required=True)
    amount = validation.positive_decimal(data, 'amount', errors,
                                         required=True)
    message = validation.text(data, 'message', errors)
    is_anonymous = data.get('is_anonymous') is True
    if 'amount' in errors:
        errors['amount'] = 'Invalid amount, must be greater than 0'
    validation.raise_if(errors)

    campaign = Campaign.query.filter_by(id=campaign_id).with_for_update() \
        .first()
    if campaign is None:
        raise NotFound('Campaign not found')
    if campaign.status != CampaignStatus.ACTIVE:
        db.session.rollback()
        raise Conflict('Campaign is closed')

    donation = CampaignDonation(campaign_id=campaign.id,
                                donor_id=actor.user_id, amount=amount,
                                currency=campaign.currency, message=message,
                                is_anonymous=is_anonymous,
                                status=PledgeStatus.COMPLETED)
    db.session.add(donation)
    Campaign.query.filter_by(id=campaign.id).update(
        {Campaign.raised: Campaign.raised + amount},
        synchronize_session=False)
    commit('Campaign pledge')
    logger.info('User %s pledged %s %s to campaign %s', actor.user_id,
                amount, campaign.currency, campaign.id)
    return donation, campaign


def close_campaign(actor, campaign_id):
    campaign = Campaign.query.filter_by(id=campaign_id).with_for_update() \
        .first()
    if campaign is None:
        raise NotFound('Campaign not found')
    if campaign.organizer_id != actor.user_id:
        db.session.rollback()
        raise PermissionDenied('Only the organizer can close a campaign')
    if campaign.status == CampaignStatus.CLOSED:
        db.session.rollback()
        raise Conflict('Campaign is already closed')
    campaign.status = CampaignStatus.CLOSED
    commit('Close campaign')
    logger.info('Campaign %s closed by user %s', campaign.id, actor.user_id)
    return campaign
