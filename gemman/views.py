"""
Gemman API views.

Reads need an authenticated user, writes and the sync trigger need
a staff user. Service errors are rendered as
{"error": message, "code": code, "data": {...}}.
"""

import logging

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.response import Response

from gemman.exceptions import ConflictError, GemError, NotFoundError, SyncInProgress, ValidationError
from gemman.serializers import InventoryUnitSerializer, SyncRunSerializer
from gemman.service import Catalog

logger = logging.getLogger('gemman')

ERROR_STATUS = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (SyncInProgress, status.HTTP_409_CONFLICT),
)

# Query parameter -> UnitQueries.search() argument
LIST_PARAMS = {
    'search': 'search',
    'status': 'status',
    'carat': 'carat',
    'colors': 'colors',
    'clarities': 'clarities',
    'shapes': 'shapes',
    'sortBy': 'sort_by',
    'sortOrder': 'sort_order',
    'take': 'take',
    'skip': 'skip',
    'ids': 'ids',
}


def error_body(exc: GemError) -> dict:
    body = exc.as_dict()
    return {'error': body['message'], 'code': body['code'], 'data': body['data']}


class GemErrorMixin:
    """Render GemError subclasses as JSON error responses."""

    def handle_exception(self, exc):
        if isinstance(exc, GemError):
            for error_class, http_status in ERROR_STATUS:
                if isinstance(exc, error_class):
                    return Response(error_body(exc), status=http_status)
            logger.error("gemman.api.unmapped_error", extra={"code": exc.code})
            return Response(error_body(exc), status=status.HTTP_500_INTERNAL_SERVER_ERROR)
        return super().handle_exception(exc)


def _payload(request) -> dict:
    data = request.data
    if hasattr(data, 'dict'):
        data = data.dict()
    if not isinstance(data, dict):
        raise ValidationError('INVALID_VALUE', 'Corpo da requisição deve ser um objeto JSON')
    return dict(data)


class UnitViewSet(GemErrorMixin, viewsets.ViewSet):
    """
    Inventory units.

    GET    units/              list (filters, sort, pagination)
    POST   units/              create
    GET    units/<pk>/         read
    PATCH  units/<pk>/         update fields and/or lifecycle
    DELETE units/<pk>/         hard delete
    POST   units/<pk>/status/  {status, owning_transaction_id}
    POST   units/release/      {owning_transaction_id} releases all its units
    """

    def get_permissions(self):
        if self.action in ('list', 'retrieve'):
            return [IsAuthenticated()]
        return [IsAdminUser()]

    def _render(self, unit_or_units, many=False):
        return InventoryUnitSerializer(unit_or_units, many=many, context={'request': self.request}).data

    def list(self, request):
        params = request.query_params
        filters = {arg: params.get(name) for name, arg in LIST_PARAMS.items() if name in params}
        page = Catalog.search(**filters)
        return Response({
            'items': self._render(page['items'], many=True),
            'total': page['total'],
            'pages': page['pages'],
        })

    def create(self, request):
        unit = Catalog.create_unit(**_payload(request))
        return Response(self._render(unit), status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        return Response(self._render(Catalog.get_unit(pk)))

    def partial_update(self, request, pk=None):
        unit = Catalog.update_unit(pk, **_payload(request))
        return Response(self._render(unit))

    def destroy(self, request, pk=None):
        Catalog.delete_unit(pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['post'], url_path='status')
    def set_status(self, request, pk=None):
        data = _payload(request)
        if 'status' not in data:
            raise ValidationError('MISSING_FIELD', field='status')
        unit = Catalog.set_status(pk, data['status'], data.get('owning_transaction_id'))
        return Response(self._render(unit))

    @action(detail=False, methods=['post'], url_path='release')
    def release(self, request):
        data = _payload(request)
        units = Catalog.release_transaction(data.get('owning_transaction_id'))
        return Response({'released': len(units), 'items': self._render(units, many=True)})


class SyncViewSet(GemErrorMixin, viewsets.ViewSet):
    """
    Catalog sync.

    POST sync/         start a sync in the background (409 while one runs)
    GET  sync/status/  latest run + catalog size
    """

    def get_permissions(self):
        if self.action == 'sync_status':
            return [IsAuthenticated()]
        return [IsAdminUser()]

    def create(self, request):
        logger.info("gemman.api.sync_requested", extra={"user": request.user.get_username()})
        return Response(Catalog.trigger_sync(), status=status.HTTP_202_ACCEPTED)

    @action(detail=False, methods=['get'], url_path='status')
    def sync_status(self, request):
        current = Catalog.sync_status()
        latest = current['latest_sync']
        return Response({
            'latest_sync': SyncRunSerializer(latest).data if latest else None,
            'total_units': current['total_units'],
        })
