# planes/views.py

from django.db.models import Q
from django.shortcuts import get_object_or_404
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods
import logging

from core.api import api_to_form_data, json_view, parse_json_body, success_response, validate_form
from core.exceptions import PlanValidationError
from core.views import serialize_impuesto, serialize_moneda
from planes.derivation import default_edited_field
from planes.forms import API_FIELD_MAP, PlanPagoForm, plan_to_form_data
from planes.models import PlanPago
from planes.services import PlanPagoService
from utils.utils import paginate_queryset, parse_filters, parse_bool

logger = logging.getLogger(__name__)


# =============================================================================
# SERIALIZATION
# =============================================================================

def _str_or_none(value):
    return str(value) if value is not None else None


def serialize_state(state):
    """PlanState -> camelCase dict (preview responses)"""
    return {
        'tipoPago': int(state.tipo_pago),
        'subtotal': str(state.subtotal),
        'total': str(state.total),
        'periodicidadValor': state.periodicidad_valor,
        'idPeriodicidadUnidad': int(state.periodicidad_unidad) if state.periodicidad_unidad is not None else None,
        'numeroCuotas': state.numero_cuotas,
        'subtotalFinal': _str_or_none(state.subtotal_final),
        'totalFinal': _str_or_none(state.total_final),
    }


def serialize_plan(plan):
    return {
        'id': str(plan.id),
        'nombre': plan.nombre,
        'descripcion': plan.descripcion,
        'tipoPago': plan.tipo_pago,
        'idMoneda': str(plan.moneda_id),
        'idImpuesto': str(plan.impuesto_id),
        'subtotal': str(plan.subtotal),
        'total': str(plan.total),
        'periodicidadValor': plan.periodicidad_valor,
        'idPeriodicidadUnidad': plan.periodicidad_unidad,
        'numeroCuotas': plan.numero_cuotas,
        'subtotalFinal': _str_or_none(plan.subtotal_final),
        'totalFinal': _str_or_none(plan.total_final),
        'activo': plan.activo,
        'fechaCreacion': plan.created_at,
        'ultimaModificacion': plan.updated_at,
        'moneda': serialize_moneda(plan.moneda),
        'impuesto': serialize_impuesto(plan.impuesto),
    }


def _bound_form(request, plan=None):
    """Validate the JSON body; PUT bodies are merged over the stored plan"""
    payload = api_to_form_data(parse_json_body(request), API_FIELD_MAP)
    if plan is None:
        form = PlanPagoForm(data=payload)
    else:
        initial = plan_to_form_data(plan)
        form = PlanPagoForm(data={**initial, **payload}, initial=initial)
    return validate_form(form, PlanValidationError)


# =============================================================================
# PLANES DE PAGO
# =============================================================================

@csrf_exempt
@json_view
@require_http_methods(["GET", "POST"])
def plan_list(request):
    """
    GET: paginated list, filters q, tipoPago, activo, idMoneda
    POST: create a plan
    """
    if request.method == "POST":
        form = _bound_form(request)
        plan = PlanPagoService.create_plan(
            form.to_state(), form.tax_rate, form.cleaned_data.get('campo_editado')
        )
        return success_response(serialize_plan(plan), "Plan de pago creado exitosamente", status=201)

    filters = parse_filters(request, ['q', 'tipoPago', 'activo', 'idMoneda'])
    planes = PlanPago.objects.select_related('moneda', 'impuesto')

    if filters['q']:
        planes = planes.filter(Q(nombre__icontains=filters['q']) | Q(descripcion__icontains=filters['q']))
    if filters['tipoPago'] and filters['tipoPago'].isdigit():
        planes = planes.filter(tipo_pago=int(filters['tipoPago']))
    activo = parse_bool(filters['activo'])
    if activo is not None:
        planes = planes.filter(activo=activo)
    if filters['idMoneda']:
        planes = planes.filter(moneda_id=filters['idMoneda'])

    page_obj, paginator = paginate_queryset(request, planes)
    return success_response({
        'planesPago': [serialize_plan(p) for p in page_obj],
        'total': paginator.count,
        'page': page_obj.number,
        'limit': paginator.per_page,
        'totalPages': paginator.num_pages,
    })


@csrf_exempt
@json_view
@require_http_methods(["GET", "PUT", "DELETE"])
def plan_detail(request, plan_id):
    plan = get_object_or_404(PlanPago.objects.select_related('moneda', 'impuesto'), pk=plan_id)

    if request.method == "PUT":
        form = _bound_form(request, plan)
        plan = PlanPagoService.update_plan(
            plan, form.to_state(), form.tax_rate, form.cleaned_data.get('campo_editado')
        )
        return success_response(serialize_plan(plan), "Plan de pago actualizado exitosamente")

    if request.method == "DELETE":
        PlanPagoService.delete_plan(plan)
        return success_response(None, "Plan de pago eliminado exitosamente")

    return success_response(serialize_plan(plan))


@csrf_exempt
@json_view
@require_http_methods(["POST"])
def plan_derive(request):
    """
    Stateless preview of the derivation for the plan editor.

    The result is advisory; create/update derive again on the server.
    """
    form = _bound_form(request)
    state = form.to_state()
    edited = form.cleaned_data.get('campo_editado') or default_edited_field(state)
    derived = PlanPagoService.preview(state, form.tax_rate, edited)
    return success_response(serialize_state(derived))
