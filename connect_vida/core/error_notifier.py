"""
Connect Vida - Error Notification System
Envia emails quando erros criticos ocorrem no sistema
"""
import logging
import traceback
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from html import escape
from typing import Optional
from functools import wraps

from connect_vida.core.clock import utcnow
from connect_vida.core.config import settings

logger = logging.getLogger(__name__)

# Cache para evitar spam de emails (mesmo erro em sequencia)
_error_cache = {}
_CACHE_TTL_SECONDS = 300  # 5 minutos entre emails do mesmo erro


def _get_error_key(error_type: str, error_msg: str) -> str:
    """Gera chave unica para o erro"""
    return f"{error_type}:{error_msg[:100]}"


def _should_send_notification(error_key: str) -> bool:
    """Verifica se deve enviar notificacao (evita spam)"""
    now = utcnow()

    if error_key in _error_cache:
        last_sent = _error_cache[error_key]
        if (now - last_sent).total_seconds() < _CACHE_TTL_SECONDS:
            return False

    _error_cache[error_key] = now
    return True


def _field(label: str, value: str) -> str:
    return f"""
        <div class="field">
            <div class="field-label">{label}</div>
            <div class="field-value"><pre>{escape(value)}</pre></div>
        </div>
    """


def send_error_notification(
    error_type: str,
    error_message: str,
    error_details: Optional[str] = None,
    church_id: Optional[str] = None,
    member_email: Optional[str] = None,
    endpoint: Optional[str] = None,
    request_data: Optional[dict] = None
):
    """
    Envia email de notificacao de erro.

    Args:
        error_type: Tipo do erro (ex: "API_ERROR", "WEBHOOK_ERROR", "GATEWAY_ERROR")
        error_message: Mensagem resumida do erro
        error_details: Stack trace ou detalhes tecnicos
        church_id: Igreja afetada (se aplicavel)
        member_email: Email do membro que causou o erro (se aplicavel)
        endpoint: Endpoint que gerou o erro
        request_data: Dados da requisicao (sanitizados)
    """
    if not settings.ERROR_NOTIFICATION_ENABLED:
        return

    if not settings.SMTP_USER or not settings.SMTP_PASSWORD:
        logger.warning("SMTP nao configurado - notificacao de erro nao enviada")
        return

    error_key = _get_error_key(error_type, error_message)
    if not _should_send_notification(error_key):
        logger.debug(f"Notificacao de erro suprimida (spam protection): {error_key}")
        return

    try:
        msg = MIMEMultipart('alternative')
        msg['Subject'] = f"[CONNECT VIDA ERRO] {error_type}: {error_message[:50]}"
        msg['From'] = f"{settings.SMTP_FROM_NAME} <{settings.SMTP_FROM_EMAIL}>"
        msg['To'] = settings.ERROR_NOTIFICATION_EMAIL

        timestamp = utcnow().strftime("%Y-%m-%d %H:%M:%S UTC")

        fields = [
            _field("Tipo do Erro", error_type),
            _field("Mensagem", error_message),
            _field("Data/Hora", timestamp),
        ]
        if church_id:
            fields.append(_field("Igreja", church_id))
        if member_email:
            fields.append(_field("Membro", member_email))
        if endpoint:
            fields.append(_field("Endpoint", endpoint))
        if request_data:
            # Sanitiza dados sensiveis
            sanitized = {k: '***' if 'token' in k.lower() or 'taxid' in k.lower() else v
                         for k, v in request_data.items()}
            fields.append(_field("Dados da Requisicao", str(sanitized)[:500]))
        if error_details:
            fields.append(_field("Detalhes Tecnicos", error_details[:2000]))

        html_body = f"""
        <!DOCTYPE html>
        <html>
        <head>
            <style>
                body {{ font-family: Arial, sans-serif; background: #f5f5f5; padding: 20px; }}
                .header {{ background: #991b1b; color: white; padding: 20px; }}
                .field {{ margin-bottom: 15px; }}
                .field-label {{ font-weight: bold; color: #374151; font-size: 12px; text-transform: uppercase; }}
                .field-value {{ background: #f9fafb; padding: 10px; border: 1px solid #e5e7eb; font-family: monospace; }}
            </style>
        </head>
        <body>
            <div class="header"><h1>&#9888; Erro no Connect Vida</h1></div>
            {''.join(fields)}
        </body>
        </html>
        """

        msg.attach(MIMEText(html_body, 'html'))

        with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT) as server:
            if settings.SMTP_TLS:
                server.starttls()
            server.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
            server.send_message(msg)

        logger.info(f"Notificacao de erro enviada: {error_type}")

    except Exception as e:
        logger.error(f"Falha ao enviar notificacao de erro: {e}")


def notify_on_error(error_type: str = "API_ERROR", endpoint: str = None):
    """
    Decorator para notificar erros automaticamente em funcoes async.

    Uso:
        @notify_on_error("WEBHOOK_ERROR", "/api/payments/asaas/webhook")
        async def process_webhook(...):
            ...
    """
    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                send_error_notification(
                    error_type=error_type,
                    error_message=str(e),
                    error_details=traceback.format_exc(),
                    church_id=kwargs.get('church_id'),
                    endpoint=endpoint or func.__name__
                )
                raise
        return wrapper
    return decorator
