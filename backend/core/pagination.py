from django.conf import settings
from rest_framework.pagination import PageNumberPagination


class StandardResultsSetPagination(PageNumberPagination):
    page_size = getattr(settings, "AUDIT_LOG_PAGE_SIZE", 20)
    page_size_query_param = 'per_page'
    max_page_size = 100
