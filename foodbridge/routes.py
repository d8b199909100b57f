from flask import g, jsonify, request
from flask_admin.contrib.sqla import ModelView
from flask_restful import Resource

from foodbridge import accounts, admin, api, app, campaigns, db, matching
from foodbridge import registry, reviews
from foodbridge.auth import token_required
from foodbridge.models import (Campaign, CampaignDonation, CampaignStatus,
                               Company, Donation, DonationRequest, ItemStatus,
                               Match, MatchStatus, Review, Urgency, User)
from foodbridge.store import parse_page_args
from foodbridge.validation import choice, json_body, raise_if, status_filter


class UserView(ModelView):
    column_exclude_list = ['password_hash']
    form_excluded_columns = ['password_hash']


admin.add_view(UserView(User, db))
admin.add_view(ModelView(Company, db))
admin.add_view(ModelView(Donation, db))
admin.add_view(ModelView(DonationRequest, db))
admin.add_view(ModelView(Match, db))
admin.add_view(ModelView(Review, db))
admin.add_view(ModelView(Campaign, db))
admin.add_view(ModelView(CampaignDonation, db))


@app.route('/', methods=['GET'])
def home():
    return jsonify({'success': True, 'message': 'Welcome to the FoodBridge api'})


class Register(Resource):
    def post(self):
        """
        @api {post} /auth/register register a new account
        @apiVersion 1.0.0
        @apiName register
        @apiGroup Auth

        @apiParam {String}      name            full name (2-100 characters)
        @apiParam {String}      email           email of the user
        @apiParam {String}      password        password (8-128 characters)
        @apiParam {String}      user_type       'individual', 'donor_company', 'recipient_company' or 'organizer'
        @apiParam {String}      company_name    required for company accounts
        @apiParam {String}      company_type    'restaurant' or 'grocery_store' (donor companies)
        @apiParam {String}      address         required for company accounts

        @apiSuccess {Object}    user            the created user
        @apiSuccess {String}    token           jwt token

        @apiError               400             validation failed
        @apiError               409             user with this email already exists
        """
        user, token = accounts.register(json_body())
        return {'success': True,
                'message': 'Account created successfully! Welcome to Food Bridge!',
                'user': user.to_dict(), 'token': token}, 201


class Login(Resource):
    def post(self):
        """
        @api {post} /auth/login get jwt token
        @apiVersion 1.0.0
        @apiName login
        @apiGroup Auth

        @apiParam {String}      email           email of user
        @apiParam {String}      password        password of user

        @apiSuccess {String}    token           jwt token

        @apiError               400             email and password are required
        @apiError               401             invalid email or password
        """
        user, token = accounts.login(json_body())
        return {'success': True, 'message': 'Login successful! Welcome back!',
                'user': user.to_dict(), 'token': token}, 200


class Logout(Resource):
    @token_required
    def post(self):
        # tokens are stateless, the client drops its copy
        return {'success': True, 'message': 'Logged out successfully'}, 200


class Me(Resource):
    @token_required
    def get(self):
        """
        @api {get} /auth/me details of the authenticated user
        @apiVersion 1.0.0
        @apiName me
        @apiGroup Auth

        @apiSuccess {Object}    user            user with its company

        @apiError               401             token is missing or invalid
        """
        return {'success': True,
                'user': accounts.profile(g.actor).to_dict()}, 200


class Categories(Resource):
    def get(self):
        categories = accounts.categories(request.args.get('type'))
        return dict(success=True, **categories), 200


class DashboardStats(Resource):
    @token_required
    def get(self):
        """
        @api {get} /dashboard/stats counters for the caller's dashboard
        @apiVersion 1.0.0
        @apiName dashboardstats
        @apiGroup Dashboard

        @apiSuccess {Object}    stats           counters, shaped by account kind
        """
        return {'success': True,
                'stats': accounts.dashboard_stats(g.actor)}, 200


class Donations(Resource):
    @token_required
    def post(self):
        """
        @api {post} /donations publish a donation
        @apiVersion 1.0.0
        @apiName donation_post
        @apiGroup Donation

        @apiParam {String}      title               title of the donation
        @apiParam {String}      category            category name
        @apiParam {Number}      quantity            quantity offered (> 0)
        @apiParam {String}      unit                unit of the quantity
        @apiParam {String}      pickup_location     where to collect it
        @apiParam {String}      [description]       free text
        @apiParam {String}      [expiry_date]       ISO-8601 date
        @apiParam {String}      [pickup_time]       ISO-8601 date
        @apiParam {String}      [special_instructions]

        @apiSuccess {Object}    donation        the stored donation

        @apiError               400             validation failed
        @apiError               403             only businesses can create donations
        """
        donation = registry.create_donation(g.actor, json_body())
        return {'success': True, 'message': 'Donation created successfully!',
                'donation': donation.to_dict()}, 201


class MyDonations(Resource):
    @token_required
    def get(self):
        """
        @api {get} /donations/my donations of the caller
        @apiVersion 1.0.0
        @apiName mydonations
        @apiGroup Donation

        @apiParam {String}      [status]        'active', 'completed', 'cancelled' or 'all'
        @apiParam {Number}      [page]          page number, from 1
        @apiParam {Number}      [limit]         page size

        @apiSuccess {Object[]}  items           donations, newest first
        @apiSuccess {Object}    pagination      page, limit, total, pages
        """
        page, limit = parse_page_args(request.args)
        status = status_filter(request.args, ItemStatus)
        return registry.list_my_donations(g.actor, status, page, limit), 200


class BrowseDonations(Resource):
    @token_required
    def get(self):
        """
        @api {get} /donations/browse active donations of every donor
        @apiVersion 1.0.0
        @apiName browsedonations
        @apiGroup Donation

        @apiParam {String}      [category]      exact category
        @apiParam {String}      [location]      substring of the pickup location
        @apiParam {Number}      [page]
        @apiParam {Number}      [limit]

        @apiSuccess {Object[]}  items           donations with a donor block
        @apiSuccess {Object}    pagination      page, limit, total, pages
        """
        page, limit = parse_page_args(request.args)
        status = status_filter(request.args, ItemStatus,
                               default=ItemStatus.ACTIVE)
        return registry.browse_donations(
            page, limit, status=status,
            category=request.args.get('category'),
            location=request.args.get('location')), 200


class Requests(Resource):
    @token_required
    def post(self):
        """
        @api {post} /requests publish a donation request
        @apiVersion 1.0.0
        @apiName request_post
        @apiGroup Request

        @apiParam {String}      title               title of the request
        @apiParam {String}      category            category name
        @apiParam {Number}      quantity            quantity needed (> 0)
        @apiParam {String}      unit                unit of the quantity
        @apiParam {String}      delivery_location   where it is needed
        @apiParam {String}      [urgency]           'normal' (default) or 'high'
        @apiParam {String}      [needed_by]         ISO-8601 date

        @apiSuccess {Object}    request         the stored request

        @apiError               400             validation failed
        """
        donation_request = registry.create_request(g.actor, json_body())
        return {'success': True,
                'message': 'Donation request created successfully!',
                'request': donation_request.to_dict()}, 201


class MyRequests(Resource):
    @token_required
    def get(self):
        page, limit = parse_page_args(request.args)
        status = status_filter(request.args, ItemStatus)
        return registry.list_my_requests(g.actor, status, page, limit), 200


class BrowseRequests(Resource):
    @token_required
    def get(self):
        page, limit = parse_page_args(request.args)
        status = status_filter(request.args, ItemStatus,
                               default=ItemStatus.ACTIVE)
        errors = {}
        urgency = choice(request.args.get('urgency'), Urgency, 'urgency',
                         errors)
        raise_if(errors)
        return registry.browse_requests(
            page, limit, status=status,
            category=request.args.get('category'),
            location=request.args.get('location'), urgency=urgency), 200


class Matches(Resource):
    @token_required
    def post(self):
        """
        @api {post} /matches propose a match
        @apiVersion 1.0.0
        @apiName match_post
        @apiGroup Match

        @apiParam {Number}      [donation_id]   donation to match (either this or request_id)
        @apiParam {Number}      [request_id]    request to match (either this or donation_id)
        @apiParam {String}      [message]       note for the owner

        @apiSuccess {Object}    match           the pending match

        @apiError               400             exactly one of donation_id or request_id is required
        @apiError               404             donation or request not found
        @apiError               409             match already exists
        """
        match = matching.create_match(g.actor, json_body())
        return {'success': True, 'message': 'Match created successfully!',
                'match': match.to_dict()}, 201


class MatchStatusUpdate(Resource):
    @token_required
    def put(self, match_id):
        """
        @api {put} /matches/:id/status move a match along
        @apiVersion 1.0.0
        @apiName matchstatus
        @apiGroup Match

        @apiParam {String}      status          'accepted', 'rejected' or 'completed'
        @apiParam {String}      [message]       replaces the match message

        @apiSuccess {Object}    match           the updated match

        @apiError               400             invalid status
        @apiError               404             match not found
        @apiError               409             transition not allowed from the current status
        """
        match = matching.update_status(g.actor, match_id, json_body())
        return {'success': True,
                'message': f'Match {match.status.value} successfully!',
                'match': match.to_dict()}, 200


class MyMatches(Resource):
    @token_required
    def get(self):
        page, limit = parse_page_args(request.args)
        status = status_filter(request.args, MatchStatus)
        return matching.list_my_matches(g.actor, status, page, limit), 200


class Reviews(Resource):
    @token_required
    def post(self):
        """
        @api {post} /reviews review a match
        @apiVersion 1.0.0
        @apiName review_post
        @apiGroup Review

        @apiParam {Number}      match_id        id of the match
        @apiParam {Number}      rating          1 to 5
        @apiParam {String}      [comment]

        @apiSuccess {Object}    review          the stored review

        @apiError               400             invalid rating (1-5)
        @apiError               403             not a participant of the match
        @apiError               404             match not found
        @apiError               409             review already exists
        """
        review = reviews.create_review(g.actor, json_body())
        return {'success': True, 'message': 'Review submitted successfully!',
                'review': review.to_dict()}, 201


class Campaigns(Resource):
    def get(self):
        """
        @api {get} /campaigns list campaigns
        @apiVersion 1.0.0
        @apiName campaign_get
        @apiGroup Campaign

        @apiParam {String}      [status]        'active', 'closed' or 'all' (default)
        @apiParam {String}      [category]
        @apiParam {Number}      [page]
        @apiParam {Number}      [limit]

        @apiSuccess {Object[]}  items           campaigns with an organizer block
        @apiSuccess {Object}    pagination      page, limit, total, pages
        """
        page, limit = parse_page_args(request.args)
        status = status_filter(request.args, CampaignStatus)
        return campaigns.list_campaigns(
            page, limit, status=status,
            category=request.args.get('category')), 200

    @token_required
    def post(self):
        """
        @api {post} /campaigns create a campaign
        @apiVersion 1.0.0
        @apiName campaign_post
        @apiGroup Campaign

        @apiParam {String}      title           title of the campaign
        @apiParam {String}      description     description of the campaign
        @apiParam {Number}      goal            monetary goal (> 0)
        @apiParam {String}      category        category name
        @apiParam {String}      start_date      ISO-8601 date
        @apiParam {String}      [end_date]      ISO-8601 date, not before start_date
        @apiParam {String}      [currency]      defaults to ETB

        @apiSuccess {Object}    campaign        the stored campaign

        @apiError               400             missing or invalid fields
        """
        campaign = campaigns.create_campaign(g.actor, json_body())
        return {'success': True, 'message': 'Campaign created successfully!',
                'campaign': campaign.to_dict()}, 201


class CampaignDonate(Resource):
    @token_required
    def post(self):
        """
        @api {post} /campaigns/donate pledge to a campaign
        @apiVersion 1.0.0
        @apiName campaigndonate
        @apiGroup Campaign

        @apiParam {Number}      campaign_id     id of the campaign
        @apiParam {Number}      amount          amount pledged (> 0)
        @apiParam {String}      [message]
        @apiParam {Boolean}     [is_anonymous]

        @apiSuccess {Object}    donation        the recorded pledge
        @apiSuccess {Object}    campaign        the campaign with its new raised total

        @apiError               400             invalid amount
        @apiError               404             campaign not found
        @apiError               409             campaign is closed
        """
        donation, campaign = campaigns.pledge(g.actor, json_body())
        return {'success': True, 'message': 'Thank you for your donation!',
                'donation': donation.to_dict(),
                'campaign': campaign.to_dict()}, 201


class CloseCampaign(Resource):
    @token_required
    def put(self, campaign_id):
        campaign = campaigns.close_campaign(g.actor, campaign_id)
        return {'success': True, 'message': 'Campaign closed',
                'campaign': campaign.to_dict()}, 200


api.add_resource(Register, '/auth/register')
api.add_resource(Login, '/auth/login')
api.add_resource(Logout, '/auth/logout')
api.add_resource(Me, '/auth/me')
api.add_resource(Categories, '/categories')
api.add_resource(DashboardStats, '/dashboard/stats')
api.add_resource(Donations, '/donations')
api.add_resource(MyDonations, '/donations/my')
api.add_resource(BrowseDonations, '/donations/browse')
api.add_resource(Requests, '/requests')
api.add_resource(MyRequests, '/requests/my')
api.add_resource(BrowseRequests, '/requests/browse')
api.add_resource(Matches, '/matches')
api.add_resource(MatchStatusUpdate, '/matches/<int:match_id>/status')
api.add_resource(MyMatches, '/matches/my')
api.add_resource(Reviews, '/reviews')
api.add_resource(Campaigns, '/campaigns')
api.add_resource(CampaignDonate, '/campaigns/donate')
api.add_resource(CloseCampaign, '/campaigns/<int:campaign_id>/close')
