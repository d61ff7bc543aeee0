from typing import Optional

from attendance_engine.api.check_ins import schemas
from attendance_engine.core.config import settings
from attendance_engine.core.logger import logger
from attendance_engine.core.mail import send_mail

ANOMALY_TEMPLATE = 'check-in-anomaly'


class AnomalyNotifier:
    """Alerts reviewers about a persisted anomaly.

    Sends a Postmark template email when a recipient is configured and
    otherwise only logs. Delivery errors propagate; the coordinator treats
    notification as fire-and-forget.
    """

    def __init__(self, recipient: Optional[str] = None):
        self.recipient = recipient

    @classmethod
    def from_settings(cls) -> 'AnomalyNotifier':
        return cls(recipient=settings.ANOMALY_ALERT_EMAIL)

    def notify(
        self, anomaly: schemas.Anomaly, record: schemas.CheckInRecord
    ) -> None:
        logger.info(
            'Anomaly %s (%s) on check-in %s of worker %s',
            anomaly.anomaly_type.value,
            anomaly.severity.value,
            record.id,
            record.worker_id,
        )
        if not self.recipient:
            return

        send_mail(
            self.recipient,
            template=ANOMALY_TEMPLATE,
            params={
                'anomaly_type': anomaly.anomaly_type.value,
                'severity': anomaly.severity.value,
                'description': anomaly.description,
                'details': anomaly.details,
                'check_in_id': record.id,
                'worker_id': record.worker_id,
                'location_id': record.location_id,
                'checked_in_at': record.checked_in_at.isoformat(),
            },
        )
