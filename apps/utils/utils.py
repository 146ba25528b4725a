# utils/utils.py

from django.conf import settings
from django.core.paginator import Paginator, EmptyPage, PageNotAnInteger

# =============================================================================
# CORE UTILITY HELPER FUNCTIONS
# =============================================================================

def paginate_queryset(request, queryset, per_page=None):
    """
    Paginate using ?page= and ?limit= (limit capped at API_MAX_PAGE_SIZE).
    Out-of-range pages fall back to the last page.
    """
    if per_page is None:
        per_page = settings.API_PAGE_SIZE
        limit = request.GET.get('limit', '').strip()
        if limit.isdigit() and int(limit) > 0:
            per_page = min(int(limit), settings.API_MAX_PAGE_SIZE)

    paginator = Paginator(queryset, per_page)
    page = request.GET.get('page', 1)
    try:
        page_obj = paginator.page(page)
    except PageNotAnInteger:
        page_obj = paginator.page(1)
    except EmptyPage:
        page_obj = paginator.page(paginator.num_pages)
    return page_obj, paginator


def parse_filters(request, filter_keys):
    """
    Extract filter values from request.GET.
    filter_keys: list of filter names to extract
    Returns dict: {key: value or None}
    """
    filters = {}
    for key in filter_keys:
        value = request.GET.get(key, '').strip()
        filters[key] = value if value else None
    return filters


def parse_bool(value):
    """'true'/'1'/'yes' -> True, 'false'/'0'/'no' -> False, anything else -> None"""
    if value is None:
        return None
    value = str(value).strip().lower()
    if value in ('true', '1', 'yes'):
        return True
    if value in ('false', '0', 'no'):
        return False
    return None
