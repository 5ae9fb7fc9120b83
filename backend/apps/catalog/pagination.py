from rest_framework.pagination import PageNumberPagination


class ProductListPagination(PageNumberPagination):
    # Storefront grid renders rows of four
    page_size = 12
    page_size_query_param = 'limit'
    max_page_size = 96
