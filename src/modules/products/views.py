"""Product API views.

Exposes the ``ProductService`` via HTTP using DRF ViewSets.
There is no stock endpoint: stock only changes through order placement.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.filters import OrderingFilter
from rest_framework.mixins import ListModelMixin
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.products.dtos import CreateProductDTO
from modules.products.exceptions import ProductAlreadyExists, ProductNotFound
from modules.products.filters import ProductFilter
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.serializers import ProductSerializer
from modules.products.services import ProductService


class ProductViewSet(ListModelMixin, GenericViewSet):
    """List, retrieve and create catalog entries.

    ``?sku=``, ``?search=`` and ``?category=`` are handled by
    ``ProductFilter``.
    """

    filterset_class = ProductFilter
    ordering_fields = ["name", "price", "stock_quantity", "created_at"]
    ordering = ["name"]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    queryset = Product.objects.all()
    serializer_class = ProductSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = ProductService(repository=ProductDjangoRepository())

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/products/{pk}/"""
        try:
            product = self._service.get_product(pk)
        except ProductNotFound:
            return Response(
                {"detail": "Product not found."},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response(ProductSerializer(product).data)

    def create(self, request: Request) -> Response:
        """POST /api/v1/products/"""
        data = request.data
        try:
            dto = CreateProductDTO(
                sku=data.get("sku", ""),
                name=data.get("name", ""),
                category=data.get("category", ""),
                price=data.get("price", "0"),
                description=data.get("description", ""),
                stock_quantity=data.get("stock_quantity", 0),
            )
        except PydanticValidationError as exc:
            return Response(
                {"detail": exc.errors(include_url=False, include_context=False)},
                status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            product = self._service.create_product(dto)
        except ProductAlreadyExists as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)

        return Response(ProductSerializer(product).data, status=status.HTTP_201_CREATED)
