"""
Erros de domínio.

Cada erro carrega um código estável (o mesmo usado pelo contrato RPC) e o
status HTTP correspondente. A mensagem é legível pelo operador.
"""


class PastelariaError(Exception):
    code = "internal"
    http_status = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PastelariaError):
    """Entrada malformada: valor inválido, motivo vazio, justificativa ausente."""
    code = "invalid-argument"
    http_status = 400


class UnauthenticatedError(PastelariaError):
    code = "unauthenticated"
    http_status = 401


class PermissionDeniedError(PastelariaError):
    """O ator não tem o papel exigido."""
    code = "permission-denied"
    http_status = 403


class NotFoundError(PastelariaError):
    code = "not-found"
    http_status = 404


class PreconditionError(PastelariaError):
    """Entidade no estado errado (turno não aberto / não fechado)."""
    code = "failed-precondition"
    http_status = 409


class TransientStoreError(PastelariaError):
    """Conflito ou timeout no banco. O chamador deve repetir a operação inteira."""
    code = "aborted"
    http_status = 503
