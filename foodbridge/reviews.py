import logging

from foodbridge import db
from foodbridge.errors import NotFound, PermissionDenied, ValidationError
from foodbridge.models import Match, Review
from foodbridge.store import commit
from foodbridge import validation

logger = logging.getLogger(__name__)


def create_review(actor, data):
    """One review per (match, reviewer); only match participants may review."""
    errors = {}
    match_id = validation.integer(data, 'match_id', errors, required=True)
    rating = validation.integer(data, 'rating', errors, required=True)
    if rating is not None and not 1 <= rating <= 5:
        errors['rating'] = 'rating must be between 1 and 5'
    comment = validation.text(data, 'comment', errors)
    if errors:
        raise ValidationError('Invalid rating (1-5)' if 'rating' in errors
                              else None, errors)

    match = db.session.get(Match, match_id)
    if match is None:
        raise NotFound('Match not found')
    if actor.user_id not in match.participant_ids():
        logger.warning('User %s tried to review match %s without taking '
                       'part in it', actor.user_id, match.id)
        raise PermissionDenied('Only participants of a match can review it')

    review = Review(match_id=match.id, reviewer_id=actor.user_id,
                    rating=rating, comment=comment or '')
    db.session.add(review)
    commit('Create review', 'Review already exists')
    logger.info('Review %s left on match %s by user %s', review.id, match_id,
                actor.user_id)
    return review
