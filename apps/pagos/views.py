# pagos/views.py

from django.db.models import Q, Sum, Value, DecimalField
from django.db.models.functions import Coalesce
from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods
from decimal import Decimal
import logging

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side

from core.api import (
    api_to_form_data,
    json_view,
    money_str,
    parse_json_body,
    success_response,
    validate_form,
)
from core.money import Money
from pagos.forms import AbonoForm, AnularForm, MatriculaPagoForm
from pagos.models import Abono, MatriculaPago
from pagos.services import InvoiceService, LedgerService
from pagos.utils import parse_date, parse_estado
from utils.utils import paginate_queryset, parse_filters

logger = logging.getLogger(__name__)

INVOICE_FILTERS = ['q', 'matriculaId', 'estado', 'idPlanPago', 'fechaVencimientoDesde', 'fechaVencimientoHasta']


# =============================================================================
# SERIALIZATION
# =============================================================================

def serialize_abono(abono):
    return {
        'id': str(abono.id),
        'matriculaPagoId': str(abono.matricula_pago_id),
        'numeroRecibo': abono.numero_recibo,
        'monto': money_str(abono.monto),
        'metodoPago': abono.metodo_pago,
        'fechaAbono': abono.fecha_abono,
        'referencia': abono.referencia,
        'nota': abono.nota,
        'usuarioId': abono.usuario_id,
    }


def serialize_pago(pago):
    """
    Invoice with its current balance. Uses the total_abonado annotation
    when the queryset has one; otherwise aggregates here.
    """
    total_abonado = getattr(pago, 'total_abonado', None)
    abonado = Money.from_decimal(total_abonado) if total_abonado is not None else pago.get_total_abonado()

    return {
        'id': str(pago.id),
        'matriculaId': pago.matricula_id,
        'idPlanPago': str(pago.plan_pago_id) if pago.plan_pago_id else None,
        'numeroPago': pago.numero_pago,
        'subtotal': money_str(pago.subtotal),
        'total': money_str(pago.total),
        'totalAbonado': str(abonado),
        'saldoPendiente': str(pago.total_pago - abonado),
        'fechaVencimiento': pago.fecha_vencimiento,
        'estado': pago.estado,
        'estadoNombre': pago.get_estado_display(),
        'fechaAnulacion': pago.fecha_anulacion,
        'motivoAnulacion': pago.motivo_anulacion,
        'fechaCreacion': pago.created_at,
    }


def serialize_resumen(resumen):
    return {
        'matriculaPagoId': resumen.matricula_pago_id,
        'totalPago': str(resumen.total_pago),
        'totalAbonado': str(resumen.total_abonado),
        'saldoPendiente': str(resumen.saldo_pendiente),
        'abonos': [
            {
                'id': entry.id,
                'numeroRecibo': entry.numero_recibo,
                'monto': str(entry.monto),
                'metodoPago': entry.metodo_pago,
                'fechaAbono': entry.fecha_abono,
                'referencia': entry.referencia,
                'nota': entry.nota,
                'usuarioId': entry.usuario_id,
            }
            for entry in resumen.abonos
        ],
    }


def _bound_form(request, form_class):
    payload = api_to_form_data(parse_json_body(request), form_class.API_FIELDS)
    return validate_form(form_class(data=payload))


def _filtered_invoices(request):
    """Invoices matching the list filters, annotated with total_abonado"""
    filters = parse_filters(request, INVOICE_FILTERS)
    pagos = MatriculaPago.objects.select_related('plan_pago')

    if filters['q']:
        pagos = pagos.filter(
            Q(matricula_id__icontains=filters['q']) |
            Q(plan_pago__nombre__icontains=filters['q']) |
            Q(pk__in=Abono.objects.filter(numero_recibo__iexact=filters['q']).values('matricula_pago_id'))
        )
    if filters['matriculaId']:
        pagos = pagos.filter(matricula_id=filters['matriculaId'])
    estado = parse_estado(filters['estado'])
    if estado is not None:
        pagos = pagos.filter(estado=estado)
    if filters['idPlanPago']:
        pagos = pagos.filter(plan_pago_id=filters['idPlanPago'])
    desde = parse_date(filters['fechaVencimientoDesde'])
    if desde:
        pagos = pagos.filter(fecha_vencimiento__gte=desde)
    hasta = parse_date(filters['fechaVencimientoHasta'])
    if hasta:
        pagos = pagos.filter(fecha_vencimiento__lte=hasta)

    # Annotate last so no filter join multiplies the sum
    pagos = pagos.annotate(
        total_abonado=Coalesce(
            Sum('abonos__monto'),
            Value(Decimal('0.00')),
            output_field=DecimalField(max_digits=14, decimal_places=2),
        )
    )
    return pagos, filters


# =============================================================================
# MATRICULAS PAGOS (INVOICES)
# =============================================================================

@csrf_exempt
@json_view
@require_http_methods(["GET", "POST"])
def matricula_pago_list(request):
    """
    GET: paginated list, filters q, matriculaId, estado, idPlanPago,
         fechaVencimientoDesde, fechaVencimientoHasta
    POST: create an invoice
    """
    if request.method == "POST":
        form = _bound_form(request, MatriculaPagoForm)
        pago = InvoiceService.create_invoice(form.cleaned_data)
        return success_response(serialize_pago(pago), "Pago de matrícula creado exitosamente", status=201)

    pagos, _ = _filtered_invoices(request)
    page_obj, paginator = paginate_queryset(request, pagos)
    return success_response({
        'matriculasPagos': [serialize_pago(p) for p in page_obj],
        'total': paginator.count,
        'page': page_obj.number,
        'limit': paginator.per_page,
        'totalPages': paginator.num_pages,
    })


@json_view
@require_http_methods(["GET"])
def matricula_pago_detail(request, pago_id):
    pago = get_object_or_404(MatriculaPago.objects.select_related('plan_pago'), pk=pago_id)
    data = serialize_pago(pago)
    data['abonos'] = [serialize_abono(a) for a in pago.abonos.all()]
    return success_response(data)


@csrf_exempt
@json_view
@require_http_methods(["POST"])
def matricula_pago_anular(request, pago_id):
    form = _bound_form(request, AnularForm)
    pago = InvoiceService.anular(pago_id, form.cleaned_data['motivo'], actor=request.user.pk)
    return success_response(serialize_pago(pago), "Pago de matrícula anulado exitosamente")


@require_http_methods(["GET"])
def matricula_pago_export(request):
    """Export the filtered invoice list to Excel"""
    pagos, filters = _filtered_invoices(request)

    wb = Workbook()
    ws = wb.active
    ws.title = "Pagos de Matricula"

    # Define styles
    header_fill = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
    header_font = Font(bold=True, color="FFFFFF", size=12)
    header_alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)

    border_style = Border(
        left=Side(style='thin', color='000000'),
        right=Side(style='thin', color='000000'),
        top=Side(style='thin', color='000000'),
        bottom=Side(style='thin', color='000000')
    )

    # Title row
    ws.merge_cells('A1:J1')
    title_cell = ws['A1']
    title_cell.value = "Reporte de Pagos de Matrícula"
    title_cell.font = Font(bold=True, size=16, color="4472C4")
    title_cell.alignment = Alignment(horizontal="center", vertical="center")

    # Subtitle with date and filters
    ws.merge_cells('A2:J2')
    subtitle_cell = ws['A2']
    filter_text = f"Generado: {timezone.localtime().strftime('%Y-%m-%d %H:%M')}"
    for key, value in filters.items():
        if value:
            filter_text += f" | {key}: {value}"
    subtitle_cell.value = filter_text
    subtitle_cell.font = Font(size=10, italic=True)
    subtitle_cell.alignment = Alignment(horizontal="center")

    ws.append([])

    headers = [
        '#', 'Matrícula', 'Pago #', 'Plan de Pago', 'Vencimiento', 'Estado',
        'Subtotal', 'Total', 'Abonado', 'Saldo'
    ]
    ws.append(headers)
    for cell in ws[4]:
        cell.fill = header_fill
        cell.font = header_font
        cell.alignment = header_alignment
        cell.border = border_style

    total_facturado = Money.zero()
    total_abonado = Money.zero()

    for idx, pago in enumerate(pagos, start=1):
        abonado = Money.from_decimal(pago.total_abonado)
        saldo = pago.total_pago - abonado
        total_facturado = total_facturado + pago.total_pago
        total_abonado = total_abonado + abonado

        ws.append([
            idx,
            pago.matricula_id,
            pago.numero_pago,
            pago.plan_pago.nombre if pago.plan_pago else '',
            pago.fecha_vencimiento.strftime('%Y-%m-%d') if pago.fecha_vencimiento else '',
            pago.get_estado_display(),
            Money.from_decimal(pago.subtotal).to_decimal(),
            pago.total_pago.to_decimal(),
            abonado.to_decimal(),
            saldo.to_decimal(),
        ])

        current_row = ws.max_row
        for cell in ws[current_row]:
            cell.border = border_style
            cell.alignment = Alignment(vertical="center", wrap_text=True)
        for cell in ws[current_row][6:10]:
            cell.number_format = '#,##0.00'

    column_widths = {
        'A': 5, 'B': 18, 'C': 8, 'D': 25, 'E': 14,
        'F': 12, 'G': 14, 'H': 14, 'I': 14, 'J': 14
    }
    for col, width in column_widths.items():
        ws.column_dimensions[col].width = width

    # Summary at bottom
    summary_row = ws.max_row + 2
    summary = [
        ('Total Pagos:', pagos.count()),
        ('Total Facturado:', total_facturado.to_decimal()),
        ('Total Abonado:', total_abonado.to_decimal()),
        ('Saldo Pendiente:', (total_facturado - total_abonado).to_decimal()),
    ]
    for offset, (label, value) in enumerate(summary):
        ws[f'A{summary_row + offset}'] = label
        ws[f'C{summary_row + offset}'] = value
        ws[f'A{summary_row + offset}'].font = Font(bold=True)
        ws[f'C{summary_row + offset}'].font = Font(bold=True)

    ws.freeze_panes = 'A5'

    response = HttpResponse(
        content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
    )
    filename = f"pagos_matricula_{timezone.localtime().strftime('%Y%m%d_%H%M%S')}.xlsx"
    response['Content-Disposition'] = f'attachment; filename="{filename}"'

    wb.save(response)
    logger.info(f"Exported {pagos.count()} invoices to {filename}")
    return response


# =============================================================================
# ABONOS
# =============================================================================

@csrf_exempt
@json_view
@require_http_methods(["POST"])
def abono_create(request):
    """
    Apply a partial payment.

    409 BalanceExceeded when monto exceeds the saldo pendiente,
    409 InvalidState on a cancelled invoice, 404 on an unknown invoice.
    """
    form = _bound_form(request, AbonoForm)
    data = form.cleaned_data
    abono = LedgerService.apply_abono(
        data['matricula_pago_id'],
        data['monto'],
        data['metodo_pago'],
        referencia=data.get('referencia'),
        nota=data.get('nota'),
        actor=request.user.pk,
    )
    resumen = LedgerService.get_resumen(abono.matricula_pago_id)
    return success_response(
        {'abono': serialize_abono(abono), 'resumen': serialize_resumen(resumen)},
        "Abono registrado exitosamente",
        status=201,
    )


@csrf_exempt
@json_view
@require_http_methods(["DELETE"])
def abono_delete(request, abono_id):
    LedgerService.remove_abono(abono_id, actor=request.user.pk)
    return success_response(None, "Abono eliminado exitosamente")


@json_view
@require_http_methods(["GET"])
def abono_resumen(request, pago_id):
    return success_response(serialize_resumen(LedgerService.get_resumen(pago_id)))


@json_view
@require_http_methods(["GET"])
def abono_recibo(request, abono_id):
    return success_response(LedgerService.get_recibo(abono_id))
