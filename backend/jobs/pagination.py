from rest_framework.pagination import PageNumberPagination


class StandardResultsSetPagination(PageNumberPagination):
    """Job list pages; ?page_size= may raise it up to a full sync's worth of jobs."""
    page_size = 50
    page_size_query_param = "page_size"
    max_page_size = 1000
