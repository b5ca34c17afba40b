"""
Exceptions for Gemman.

All errors carry a structured code for programmatic handling.
Lifecycle and numbering errors propagate to the caller; feed and
persistence errors are caught by the sync engine and recorded on the
SyncRun.
"""

from decimal import Decimal
from typing import Any


class BaseError(Exception):
    """
    Exception with a machine-readable code and context data.

    Usage:
        raise ConflictError('DUPLICATE_STOCK_ID', stock_id='TR001')

    Attributes:
        code: Error code for programmatic handling
        message: Human-readable message
        data: Additional context data
    """

    _default_messages: dict[str, str] = {}

    def __init__(self, code: str, message: str | None = None, **data):
        self.code = code
        self.message = message or self._default_messages.get(code, code)
        self.data = data
        super().__init__(f"[{code}] {self.message}")

    def as_dict(self) -> dict[str, Any]:
        """Serialize to dict (useful for APIs)."""
        return {
            'code': self.code,
            'message': self.message,
            'data': {
                k: str(v) if isinstance(v, Decimal) else v
                for k, v in self.data.items()
            }
        }


class GemError(BaseError):
    """Root of every Gemman error."""


class ValidationError(GemError):
    """
    Invalid request rejected before any mutation.

    Usage:
        try:
            catalog.set_status(unit.pk, 'sold')
        except ValidationError as e:
            if e.code == 'OWNER_REQUIRED':
                ...
    """

    _default_messages = {
        'INVALID_STATUS': 'Status inválido',
        'OWNER_REQUIRED': 'Transação responsável é obrigatória para este status',
        'MISSING_FIELD': 'Campo obrigatório ausente',
        'UNKNOWN_FIELD': 'Campo desconhecido',
        'INVALID_VALUE': 'Valor inválido',
        'INVALID_SORT': 'Ordenação não permitida',
        'INVALID_PAGINATION': 'Paginação inválida',
        'UNKNOWN_DOCUMENT_TYPE': 'Tipo de documento desconhecido',
        'SEQUENCE_EXHAUSTED': 'Sequência diária esgotada',
    }


class NotFoundError(GemError):
    """Unknown unit id."""

    _default_messages = {
        'UNIT_NOT_FOUND': 'Pedra não encontrada',
    }


class ConflictError(GemError):
    """Identifier already used by another unit."""

    _default_messages = {
        'DUPLICATE_STOCK_ID': 'Stock ID já existe em outra pedra',
    }


class FeedError(GemError):
    """Failure talking to the supplier feed."""


class TransientFeedError(FeedError):
    """Feed unreachable or refused the request. Retried on the next tick."""

    _default_messages = {
        'FEED_NOT_CONFIGURED': 'URL do fornecedor não configurada',
        'FEED_UNREACHABLE': 'Fornecedor inacessível',
        'FEED_TIMEOUT': 'Tempo esgotado ao consultar o fornecedor',
        'FEED_DEADLINE': 'Prazo total de consulta ao fornecedor esgotado',
        'FEED_REJECTED': 'Fornecedor recusou a requisição',
    }


class MalformedFeedPayload(FeedError):
    """Feed answered with something other than the agreed contract."""

    _default_messages = {
        'MALFORMED_PAYLOAD': 'Resposta do fornecedor em formato inesperado',
        'MISSING_IDENTIFIER': 'Registro sem Stock ID',
        'IDENTIFIER_TOO_LONG': 'Stock ID maior que o permitido',
    }


class PersistenceError(GemError):
    """Database failure while applying a batch."""

    _default_messages = {
        'PERSISTENCE_FAILED': 'Falha ao gravar lote no banco de dados',
    }


class SyncInProgress(GemError):
    """Another sync run is still active."""

    _default_messages = {
        'SYNC_IN_PROGRESS': 'Já existe uma sincronização em andamento',
    }
