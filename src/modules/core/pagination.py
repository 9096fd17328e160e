"""Page-number pagination with an explicit ``pagination`` block.

Query parameters: ``page`` (1-based) and ``limit`` (page size, capped at
``max_page_size``).
"""

from __future__ import annotations

from collections import OrderedDict

from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class StandardResultsSetPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = "limit"
    max_page_size = 100

    def get_paginated_response(self, data) -> Response:
        page = self.page
        return Response(
            OrderedDict(
                [
                    ("results", data),
                    (
                        "pagination",
                        {
                            "page": page.number,
                            "limit": page.paginator.per_page,
                            "total": page.paginator.count,
                            "total_pages": page.paginator.num_pages,
                            "has_next": page.has_next(),
                            "has_prev": page.has_previous(),
                        },
                    ),
                ]
            )
        )

    def get_paginated_response_schema(self, schema: dict) -> dict:
        return {
            "type": "object",
            "required": ["results", "pagination"],
            "properties": {
                "results": schema,
                "pagination": {
                    "type": "object",
                    "properties": {
                        "page": {"type": "integer"},
                        "limit": {"type": "integer"},
                        "total": {"type": "integer"},
                        "total_pages": {"type": "integer"},
                        "has_next": {"type": "boolean"},
                        "has_prev": {"type": "boolean"},
                    },
                },
            },
        }
