# [ Imports ]
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import cm
from reportlab.pdfgen import canvas
from reportlab.lib.colors import HexColor
from datetime import date
from decimal import Decimal
from io import BytesIO
from xml.sax.saxutils import escape
import logging

from reportlab.platypus import Paragraph
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.enums import TA_JUSTIFY, TA_CENTER

from connect_vida.core.clock import utcnow
from connect_vida.core.error_notifier import notify_on_error

logger = logging.getLogger(__name__)

MESES = ['janeiro', 'fevereiro', 'março', 'abril', 'maio', 'junho',
         'julho', 'agosto', 'setembro', 'outubro', 'novembro', 'dezembro']

THANKS_TEXT = "Agradecemos sua generosidade e compromisso com a obra de Deus."
VERSE_TEXT = (
    "\"Cada um contribua segundo propôs no seu coração; não com tristeza, ou por necessidade; "
    "porque Deus ama ao que dá com alegria.\" (2 Coríntios 9:7)"
)


# ==========================================
# CONFIGURAÇÕES DE DESIGN
# ==========================================
class ReceiptDesign:
    PRIMARY = '#111827'      # Textos
    SECONDARY = '#2563eb'    # Linhas e título
    DARK = '#343a40'
    GRAY = '#6c757d'
    BACKGROUND = '#F5F8FF'   # Caixa de valor

    FONT_BOLD = "Helvetica-Bold"
    FONT_REGULAR = "Helvetica"
    FONT_ITALIC = "Helvetica-Oblique"

    MARGIN_LEFT = 2.5*cm
    MARGIN_RIGHT = 2.5*cm
    MARGIN_TOP = 2.5*cm
    MARGIN_BOTTOM = 2.5*cm

    SPACE_L = 1.5*cm
    SPACE_M = 1.0*cm
    SPACE_S = 0.6*cm


# ==========================================
# FORMATAÇÃO
# ==========================================

def format_brl(amount) -> str:
    """1234.5 -> 'R$ 1.234,50'"""
    return f"R$ {amount:,.2f}".replace(',', 'X').replace('.', ',').replace('X', '.')


def numero_por_extenso(valor: Decimal) -> str:
    """Converte valor monetário para extenso"""
    unidades = ["", "Um", "Dois", "Três", "Quatro", "Cinco", "Seis", "Sete", "Oito", "Nove"]
    dezenas = ["", "", "Vinte", "Trinta", "Quarenta", "Cinquenta", "Sessenta", "Setenta", "Oitenta", "Noventa"]
    especiais = ["Dez", "Onze", "Doze", "Treze", "Catorze", "Quinze", "Dezesseis", "Dezessete", "Dezoito", "Dezenove"]
    centenas = ["", "Cento", "Duzentos", "Trezentos", "Quatrocentos", "Quinhentos", "Seiscentos", "Setecentos", "Oitocentos", "Novecentos"]

    def converte_ate_999(n):
        if n == 0:
            return ""
        elif n < 10:
            return unidades[n]
        elif n < 20:
            return especiais[n - 10]
        elif n < 100:
            d, u = divmod(n, 10)
            if u == 0:
                return dezenas[d]
            return f"{dezenas[d]} e {unidades[u]}"
        else:
            c, resto = divmod(n, 100)
            if n == 100:
                return "Cem"
            if resto == 0:
                return centenas[c]
            return f"{centenas[c]} e {converte_ate_999(resto)}"

    valor_int = int(valor)
    centavos = int(round((valor - valor_int) * 100))

    if valor_int == 0 and centavos == 0:
        return "Zero Reais"

    if valor_int >= 1000000:
        milhoes, resto = divmod(valor_int, 1000000)
        parte_inteira = "Um Milhão" if milhoes == 1 else f"{converte_ate_999(milhoes)} Milhões"
        if resto > 0:
            parte_inteira += f" e {converte_ate_999(resto)}"
    elif valor_int >= 1000:
        milhares, resto = divmod(valor_int, 1000)
        parte_inteira = "Mil" if milhares == 1 else f"{converte_ate_999(milhares)} Mil"
        if resto > 0:
            parte_inteira += f" e {converte_ate_999(resto)}"
    else:
        parte_inteira = converte_ate_999(valor_int)

    if valor_int == 1:
        parte_inteira += " Real"
    elif valor_int > 1:
        parte_inteira += " Reais"

    if centavos > 0:
        parte_centavos = "Um Centavo" if centavos == 1 else f"{converte_ate_999(centavos)} Centavos"
        if parte_inteira:
            return f"{parte_inteira} e {parte_centavos}"
        return parte_centavos

    return parte_inteira


def data_por_extenso(value: date) -> str:
    return f"{value.day} de {MESES[value.month - 1]} de {value.year}"


# ==========================================
# FUNÇÕES DE DESENHO
# ==========================================

def draw_line(c, y_pos, margin_left=None, margin_right=None):
    largura = A4[0]
    left = margin_left if margin_left is not None else ReceiptDesign.MARGIN_LEFT
    right = margin_right if margin_right is not None else ReceiptDesign.MARGIN_RIGHT
    c.setStrokeColor(HexColor(ReceiptDesign.SECONDARY))
    c.setLineWidth(1.2)
    c.line(left, y_pos, largura - right, y_pos)
    return y_pos - 0.2*cm


def _centered_style(size, font, color):
    return ParagraphStyle(
        name=f"centered-{font}-{size}",
        parent=getSampleStyleSheet()['Normal'],
        alignment=TA_CENTER,
        fontName=font,
        fontSize=size,
        leading=size + 3,
        textColor=HexColor(color),
    )


def draw_header(c, church_data, y_position):
    """Nome, endereço e CNPJ da igreja centralizados"""
    largura = A4[0]
    text_width = largura - ReceiptDesign.MARGIN_LEFT - ReceiptDesign.MARGIN_RIGHT

    lines = [Paragraph(escape((church_data.get('name') or 'Igreja').upper()),
                       _centered_style(16, ReceiptDesign.FONT_BOLD, ReceiptDesign.PRIMARY))]
    if church_data.get('address'):
        lines.append(Paragraph(escape(church_data['address']),
                               _centered_style(10, ReceiptDesign.FONT_REGULAR, ReceiptDesign.GRAY)))
    if church_data.get('cnpj'):
        lines.append(Paragraph(f"CNPJ: {escape(church_data['cnpj'])}",
                               _centered_style(10, ReceiptDesign.FONT_REGULAR, ReceiptDesign.GRAY)))

    for p in lines:
        w, h = p.wrap(text_width, 5*cm)
        p.drawOn(c, ReceiptDesign.MARGIN_LEFT, y_position - h)
        y_position -= h + 0.1*cm

    return draw_line(c, y_position - ReceiptDesign.SPACE_S) - ReceiptDesign.SPACE_M


def draw_title(c, y_position):
    c.setFont(ReceiptDesign.FONT_BOLD, 22)
    c.setFillColor(HexColor(ReceiptDesign.SECONDARY))
    c.drawCentredString(A4[0] / 2, y_position, "RECIBO DE DOAÇÃO")
    return y_position - ReceiptDesign.SPACE_L


def draw_amount(c, amount, y_position):
    """Caixa com o valor numérico e por extenso"""
    largura = A4[0]
    container_height = 3.0*cm
    box_x = ReceiptDesign.MARGIN_LEFT
    box_y = y_position - container_height
    box_width = largura - ReceiptDesign.MARGIN_LEFT - ReceiptDesign.MARGIN_RIGHT

    c.setFillColor(HexColor(ReceiptDesign.BACKGROUND))
    c.setStrokeColor(HexColor(ReceiptDesign.SECONDARY))
    c.setLineWidth(1.5)
    c.roundRect(box_x, box_y, box_width, container_height, 0.3*cm, stroke=1, fill=1)

    c.setFont(ReceiptDesign.FONT_BOLD, 30)
    c.setFillColor(HexColor(ReceiptDesign.SECONDARY))
    c.drawCentredString(largura / 2, y_position - 1.3*cm, format_brl(amount))

    c.setFont(ReceiptDesign.FONT_ITALIC, 11)
    c.setFillColor(HexColor(ReceiptDesign.DARK))
    c.drawCentredString(largura / 2, y_position - 2.4*cm, f"({numero_por_extenso(amount)})")

    return y_position - (container_height + ReceiptDesign.SPACE_M)


def draw_details(c, contribution, y_position):
    """Texto do recibo justificado"""
    max_width = A4[0] - ReceiptDesign.MARGIN_LEFT - ReceiptDesign.MARGIN_RIGHT

    contribution_date = contribution.get('date')
    if isinstance(contribution_date, str):
        contribution_date = date.fromisoformat(contribution_date[:10])
    data_formatada = contribution_date.strftime('%d/%m/%Y') if contribution_date else '-'

    full_text = (
        f"Recebemos de <b>{escape(contribution.get('member_name') or 'Membro')}</b> a importância de "
        f"<b>{format_brl(contribution['amount'])}</b>, referente a <b>{escape(contribution.get('category') or '')}</b>."
        f"<br/><br/>Data da Contribuição: <b>{data_formatada}</b>"
        f"<br/>Método de Pagamento: <b>{escape(contribution.get('payment_method') or '-')}</b>"
    )

    style = ParagraphStyle(
        name="details",
        parent=getSampleStyleSheet()['Normal'],
        fontName=ReceiptDesign.FONT_REGULAR,
        fontSize=12,
        leading=16,
        alignment=TA_JUSTIFY,
        textColor=HexColor(ReceiptDesign.DARK),
    )
    p = Paragraph(full_text, style)
    w, h = p.wrap(max_width, 10*cm)
    p.drawOn(c, ReceiptDesign.MARGIN_LEFT, y_position - h)

    return y_position - h - ReceiptDesign.SPACE_L


def draw_thanks(c, y_position):
    max_width = A4[0] - ReceiptDesign.MARGIN_LEFT - ReceiptDesign.MARGIN_RIGHT
    for text, font in ((THANKS_TEXT, ReceiptDesign.FONT_REGULAR), (VERSE_TEXT, ReceiptDesign.FONT_ITALIC)):
        p = Paragraph(escape(text), _centered_style(10, font, ReceiptDesign.GRAY))
        w, h = p.wrap(max_width, 5*cm)
        p.drawOn(c, ReceiptDesign.MARGIN_LEFT, y_position - h)
        y_position -= h + 0.3*cm
    return y_position - ReceiptDesign.SPACE_L


def draw_signature(c, church_data, y_position, issued_on: date):
    largura = A4[0]
    centro_x = largura / 2

    c.setFont(ReceiptDesign.FONT_REGULAR, 11)
    c.setFillColor(HexColor(ReceiptDesign.DARK))
    c.drawCentredString(centro_x, y_position, f"Emitido em {data_por_extenso(issued_on)}.")

    line_y = draw_line(c, y_position - ReceiptDesign.SPACE_L, 6*cm, 6*cm)

    c.setFont(ReceiptDesign.FONT_REGULAR, 10)
    c.setFillColor(HexColor(ReceiptDesign.GRAY))
    c.drawCentredString(centro_x, line_y - 0.3*cm, "Assinatura do Tesoureiro")

    c.setFont(ReceiptDesign.FONT_BOLD, 12)
    c.setFillColor(HexColor(ReceiptDesign.PRIMARY))
    c.drawCentredString(centro_x, line_y - 0.9*cm, (church_data.get('name') or '').upper())


def draw_document_code(c, code):
    c.setFont(ReceiptDesign.FONT_REGULAR, 8)
    c.setFillColor(HexColor(ReceiptDesign.GRAY))
    c.drawCentredString(A4[0] / 2, ReceiptDesign.MARGIN_BOTTOM / 2, code)


# ==========================================
# FUNÇÃO PRINCIPAL (GERADOR)
# ==========================================

@notify_on_error("RECEIPT_ERROR", "/api/contributions/{id}/receipt")
async def generate_donation_receipt_pdf(contribution: dict, church_data: dict) -> bytes:
    """
    Gera o PDF do recibo de doação.

    contribution: id, member_name, amount, category, date, payment_method
    church_data: name, address, cnpj
    """
    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    c.setTitle("Recibo de Doação")

    try:
        y_pos = A4[1] - ReceiptDesign.MARGIN_TOP
        amount = Decimal(str(contribution.get('amount', 0))).quantize(Decimal("0.01"))
        doc_code = f"DOA-{(contribution.get('id') or '')[:8].upper()}-{utcnow().strftime('%Y%m%d')}"

        y_pos = draw_header(c, church_data, y_pos)
        y_pos = draw_title(c, y_pos)
        y_pos = draw_amount(c, amount, y_pos)
        y_pos = draw_details(c, {**contribution, "amount": amount}, y_pos)
        y_pos = draw_thanks(c, y_pos)
        draw_signature(c, church_data, y_pos, date.today())
        draw_document_code(c, doc_code)

        c.showPage()
        c.save()

        pdf_bytes = buffer.getvalue()
        logger.info(f"Recibo de doação gerado - Valor: {format_brl(amount)}")
        return pdf_bytes

    except Exception as e:
        logger.error(f"Erro ao gerar PDF: {str(e)}")
        raise
    finally:
        buffer.close()
