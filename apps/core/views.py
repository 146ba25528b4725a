# core/views.py

from django.db.models import Q
from django.views.decorators.http import require_http_methods
import logging

from core.api import json_view, success_response
from core.models import Impuesto, Moneda
from utils.utils import parse_filters, parse_bool

logger = logging.getLogger(__name__)

CATALOG_FILTERS = ['activo', 'codigo', 'nombre']


def serialize_impuesto(impuesto):
    return {
        'id': str(impuesto.id),
        'nombre': impuesto.nombre,
        'codigo': impuesto.codigo,
        'tasa': str(impuesto.tasa),
        'tasaDecimal': str(impuesto.get_rate()),
        'esExento': impuesto.es_exento,
        'descripcion': impuesto.descripcion,
        'activo': impuesto.activo,
    }


def serialize_moneda(moneda):
    return {
        'id': str(moneda.id),
        'codigo': moneda.codigo,
        'nombre': moneda.nombre,
        'simbolo': moneda.simbolo,
        'activo': moneda.activo,
    }


def _filter_catalog(queryset, filters):
    activo = parse_bool(filters['activo'])
    if activo is not None:
        queryset = queryset.filter(activo=activo)
    if filters['codigo']:
        queryset = queryset.filter(codigo__iexact=filters['codigo'])
    if filters['nombre']:
        queryset = queryset.filter(Q(nombre__icontains=filters['nombre']))
    return queryset


# =============================================================================
# IMPUESTOS
# =============================================================================

@json_view
@require_http_methods(["GET"])
def impuesto_list(request):
    """Tax rates, filterable by activo/codigo/nombre"""
    filters = parse_filters(request, CATALOG_FILTERS)
    impuestos = _filter_catalog(Impuesto.objects.all(), filters)
    return success_response([serialize_impuesto(i) for i in impuestos])


# =============================================================================
# MONEDAS
# =============================================================================

@json_view
@require_http_methods(["GET"])
def moneda_list(request):
    """Currencies, filterable by activo/codigo/nombre"""
    filters = parse_filters(request, CATALOG_FILTERS)
    monedas = _filter_catalog(Moneda.objects.all(), filters)
    return success_response([serialize_moneda(m) for m in monedas])
