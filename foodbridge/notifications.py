import logging

import sendgrid
from flask import current_app
from python_http_client.exceptions import HTTPError

logger = logging.getLogger(__name__)


def mail_client():
    api_key = current_app.config.get('SENDGRID_API_KEY')
    if not api_key:
        return None
    return sendgrid.SendGridAPIClient(api_key=api_key)


def send_mail(to_email, subject, text):
    sg = mail_client()
    if sg is None:
        logger.debug('SendGrid not configured, skipping mail to %s', to_email)
        return None
    data = {
        "personalizations": [
            {
                "to": [
                    {
                        "email": to_email
                    }
                ],
                "subject": subject
            }
        ],
        "from": {
            "email": current_app.config['SENDGRID_DEFAULT_FROM'],
            "name": "FoodBridge"
        },
        "content": [
            {
                "type": "text/plain",
                "value": text
            }
        ]
    }
    try:
        response = sg.client.mail.send.post(request_body=data)
    except HTTPError as e:
        logger.error('SendGrid rejected mail to %s: %s', to_email, e)
        return None
    logger.info('Mail to %s accepted with status %s', to_email,
                response.status_code)
    return response.status_code


def send_match_notification(match):
    """Tell the owner of the matched donation or request about the proposal."""
    item = match.donation if match.donation is not None else match.request
    owner = item.donor if match.donation is not None else item.requester
    proposer = match.user
    text = (f"Hi {owner.full_name}, {proposer.full_name} has proposed a match "
            f"for \"{item.title}\".")
    if match.message:
        text += f"\n\nMessage: {match.message}"
    return send_mail(owner.email, 'New match for your listing', text)
