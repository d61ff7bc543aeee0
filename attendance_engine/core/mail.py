from enum import Enum

import requests

from attendance_engine.core.config import Environment, settings
from attendance_engine.core.logger import logger


class EmailStatus(str, Enum):
    SUCCESS = 'success'


def send_mail(
    receiver_mail: str,
    *,
    template: str,
    params: dict,
):
    logger.info('sending %s email to %s', template, receiver_mail)
    url = 'https://api.postmarkapp.com/email/withTemplate'
    headers = {
        'Accept': 'application/json',
        'Content-Type': 'application/json',
        'X-Postmark-Server-Token': settings.POSTMARK_API_TOKEN,
    }
    data = {
        'From': f'{settings.EMAIL_FROM_NAME} <{settings.EMAIL_FROM_ADDRESS}>',
        'To': receiver_mail,
        'TemplateAlias': template,
        'TemplateModel': params,
    }
    if settings.EMAIL_REPLY_TO:
        data['ReplyTo'] = settings.EMAIL_REPLY_TO

    if settings.ENVIRONMENT == Environment.TEST:
        return {'status': EmailStatus.SUCCESS}

    response = requests.post(url, json=data, headers=headers, timeout=10)
    response.raise_for_status()

    return {'status': EmailStatus.SUCCESS, 'response': response.json()}
