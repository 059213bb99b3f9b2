from django.core.paginator import Paginator

from .utils import parse_positive_int


def paginate_queryset(request, queryset, serializer_class, default_limit=50, max_limit=200, context=None):
    """
    Page through a queryset using ?page=&limit= query params
    Returns the response payload: results, count, next, previous, page, page_size, total_pages
    """
    limit = parse_positive_int(request.query_params.get('limit'), default_limit, maximum=max_limit)
    page = parse_positive_int(request.query_params.get('page'), 1)

    paginator = Paginator(queryset, limit)
    page_obj = paginator.get_page(page)

    serializer = serializer_class(page_obj, many=True, context=context or {'request': request})
    return {
        'results': serializer.data,
        'count': paginator.count,
        'next': page_obj.next_page_number() if page_obj.has_next() else None,
        'previous': page_obj.previous_page_number() if page_obj.has_previous() else None,
        'page': page_obj.number,
        'page_size': limit,
        'total_pages': paginator.num_pages,
    }
