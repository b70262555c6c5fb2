"""
Servico de Cobranca das Igrejas

Mantem o historico de pagamentos (JSON embutido na igreja) e reconcilia
last_payment_status / next_payment_date a cada inclusao, edicao ou exclusao.
Tambem aplica os pagamentos confirmados pelo webhook do Asaas.
"""
import logging
import uuid
from datetime import date, datetime
from typing import List, Optional

from dateutil.relativedelta import relativedelta

from connect_vida.models import Church, ChurchStatus, PaymentRecordStatus

logger = logging.getLogger(__name__)

NO_PAYMENT_STATUS = "N/A"
WEBHOOK_RECORDER = "Webhook ASAAS"


class BillingError(Exception):
    """Registro de pagamento invalido ou inexistente"""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def add_months(value: date, months: int = 1) -> date:
    """Soma meses mantendo o dia, limitado ao ultimo dia do mes de destino"""
    return value + relativedelta(months=months)


def parse_date(value) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _sorted_newest_first(history: List[dict]) -> List[dict]:
    return sorted(history, key=lambda r: parse_date(r.get("date")) or date.min, reverse=True)


def validate_record(data: dict) -> dict:
    """Valida e normaliza um registro de pagamento"""
    amount = data.get("amount")
    if amount is None or float(amount) <= 0:
        raise BillingError("Valor do pagamento deve ser maior que zero")
    if not data.get("date"):
        raise BillingError("Data do pagamento é obrigatória")
    if not data.get("status"):
        raise BillingError("Status do pagamento é obrigatório")
    if not data.get("method"):
        raise BillingError("Método de pagamento é obrigatório")

    valid_status = [s.value for s in PaymentRecordStatus]
    if data["status"] not in valid_status:
        raise BillingError(f"Status inválido. Use: {', '.join(valid_status)}")

    try:
        record_date = parse_date(data["date"])
    except ValueError:
        raise BillingError("Data do pagamento inválida")

    return {
        "id": data.get("id") or str(uuid.uuid4()),
        "date": record_date.isoformat(),
        "amount": round(float(amount), 2),
        "status": data["status"],
        "method": data["method"],
        "reference": data.get("reference"),
        "recorded_by": data.get("recorded_by"),
    }


def _reevaluate_from_newest(church: Church, history: List[dict]):
    """O registro mais recente define o status; se Pago, vencimento = data + 1 mes"""
    if not history:
        church.last_payment_status = NO_PAYMENT_STATUS
        church.next_payment_date = None
        return

    newest = history[0]
    church.last_payment_status = newest["status"]
    if newest["status"] == PaymentRecordStatus.PAID.value:
        church.next_payment_date = add_months(parse_date(newest["date"]))


def add_payment_record(church: Church, data: dict) -> dict:
    record = validate_record(data)
    history = _sorted_newest_first(list(church.payment_history or []) + [record])
    # Nova lista para o SQLAlchemy detectar a alteracao do JSON
    church.payment_history = history

    record_date = parse_date(record["date"])
    if record["status"] == PaymentRecordStatus.PAID.value:
        if church.next_payment_date is None or record_date >= church.next_payment_date:
            church.last_payment_status = PaymentRecordStatus.PAID.value
            church.next_payment_date = add_months(record_date)
    elif record["status"] in (PaymentRecordStatus.OVERDUE.value, PaymentRecordStatus.PENDING.value):
        church.last_payment_status = record["status"]

    logger.info(f"Pagamento {record['id']} ({record['status']}) adicionado à igreja {church.id}")
    return record


def edit_payment_record(church: Church, record_id: str, data: dict) -> dict:
    history = list(church.payment_history or [])
    index = next((i for i, r in enumerate(history) if r.get("id") == record_id), None)
    if index is None:
        raise BillingError("Registro de pagamento não encontrado", 404)

    record = validate_record({**history[index], **data, "id": record_id})
    history[index] = record
    history = _sorted_newest_first(history)
    church.payment_history = history
    _reevaluate_from_newest(church, history)

    logger.info(f"Pagamento {record_id} editado na igreja {church.id}")
    return record


def delete_payment_record(church: Church, record_id: str):
    history = list(church.payment_history or [])
    remaining = [r for r in history if r.get("id") != record_id]
    if len(remaining) == len(history):
        raise BillingError("Registro de pagamento não encontrado", 404)

    remaining = _sorted_newest_first(remaining)
    church.payment_history = remaining
    _reevaluate_from_newest(church, remaining)

    logger.info(f"Pagamento {record_id} removido da igreja {church.id}")


def apply_webhook_payment(church: Church, payment: dict) -> bool:
    """
    Registra um pagamento confirmado pelo gateway.
    Retorna False quando a referencia ja existe no historico.
    """
    reference = payment.get("id")
    history = list(church.payment_history or [])
    if reference and any(r.get("reference") == reference for r in history):
        logger.info(f"Pagamento {reference} já registrado para a igreja {church.id}")
        return False

    payment_date = parse_date(payment.get("paymentDate")) or date.today()
    billing_type = payment.get("billingType") or "PIX"

    record = {
        "id": str(uuid.uuid4()),
        "date": payment_date.isoformat(),
        "amount": round(float(payment.get("value") or 0), 2),
        "status": PaymentRecordStatus.PAID.value,
        "method": f"ASAAS ({billing_type})",
        "reference": reference,
        "recorded_by": WEBHOOK_RECORDER,
    }
    church.payment_history = _sorted_newest_first(history + [record])

    church.status = ChurchStatus.ACTIVE.value
    church.last_payment_status = PaymentRecordStatus.PAID.value
    church.next_payment_date = parse_date(payment.get("nextDueDate")) or add_months(payment_date)
    if payment.get("subscription"):
        church.external_subscription_id = payment["subscription"]

    logger.info(f"Pagamento {reference} confirmado via webhook para a igreja {church.id}")
    return True
