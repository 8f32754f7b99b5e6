"""
Unit of Work - Implementação Django.

Gerencia transações atômicas entre múltiplos repositórios,
garantindo consistência de dados.

Responsabilidades:
- Abrir/fechar um bloco transaction.atomic
- Commit/Rollback coordenado
- Publicar eventos após commit bem-sucedido

Blocos atômicos aninhados viram savepoints, então um UoW usado
dentro de outra transação (ex: TestCase) continua correto.
"""

from typing import List, Optional
import logging

from django.db import transaction

from portal_lgpd.core.shared.events import DomainEvent
from portal_lgpd.core.shared.interfaces import EventPublisher, UnitOfWork

logger = logging.getLogger(__name__)


class DjangoUnitOfWork(UnitOfWork):
    """
    Implementação Django do Unit of Work.

    Usa django.db.transaction.atomic para delimitar a transação.
    Eventos são publicados apenas após commit bem-sucedido.

    Example:
        uow = DjangoUnitOfWork(event_publisher)
        with uow:
            solicitacao_repo.save(solicitacao)
            auditoria_repo.add(log)
            uow.publish_event(SolicitacaoLGPDCriadaEvent(...))
        # Commit automático + eventos publicados

    Example com rollback:
        with uow:
            titular_repo.delete(tipo, titular_id)
            raise Exception("Erro!")
        # Rollback automático, eventos descartados
    """

    atomic = True

    def __init__(self, event_publisher: Optional[EventPublisher] = None, using: Optional[str] = None):
        """
        Args:
            event_publisher: Publicador de eventos (Celery, logging)
            using: Alias do banco (padrão: default)
        """
        super().__init__()
        self._event_publisher = event_publisher
        self._using = using
        self._atomic_block = None
        self._committed = False
        self._rolled_back = False

    def _begin_transaction(self) -> None:
        if self._atomic_block is not None:
            raise RuntimeError("DjangoUnitOfWork não suporta blocos aninhados na mesma instância")

        self._committed = False
        self._rolled_back = False
        self.clear_events()
        self._atomic_block = transaction.atomic(using=self._using)
        self._atomic_block.__enter__()
        logger.debug("Transaction started")

    def commit(self) -> None:
        """
        Fecha o bloco atômico e publica eventos.

        Ordem de execução:
        1. Commit (saída do bloco atomic)
        2. Publicar eventos para handlers assíncronos
        """
        if self._atomic_block is None:
            logger.warning("Transaction already finalized")
            return

        bloco, self._atomic_block = self._atomic_block, None
        try:
            bloco.__exit__(None, None, None)
        except Exception as e:
            logger.error(f"Commit failed: {e}")
            self._rolled_back = True
            self.clear_events()
            raise

        self._committed = True
        logger.debug("Transaction committed")
        self._publish_events()

    def rollback(self) -> None:
        """Desfaz todas as mudanças e descarta eventos."""
        if self._atomic_block is None:
            return

        bloco, self._atomic_block = self._atomic_block, None
        try:
            transaction.set_rollback(True, using=self._using)
            bloco.__exit__(None, None, None)
            logger.debug("Transaction rolled back")
        except Exception as e:
            logger.error(f"Rollback failed: {e}")
        finally:
            self._rolled_back = True
            self.clear_events()

    def _publish_events(self) -> None:
        """
        Publica eventos para handlers assíncronos.

        Falhas de publicação são logadas e não afetam o resultado
        da operação já comitada.
        """
        eventos = self.collect_events()
        self.clear_events()

        for event in eventos:
            logger.info(
                f"Publishing event: {event.event_type} "
                f"for aggregate {event.aggregate_id}"
            )
            if self._event_publisher:
                try:
                    self._event_publisher.publish(event)
                except Exception as e:
                    logger.error(f"Failed to publish event: {e}")

    @property
    def is_committed(self) -> bool:
        return self._committed

    @property
    def is_rolled_back(self) -> bool:
        return self._rolled_back


class InMemoryUnitOfWork(UnitOfWork):
    """
    Unit of Work em memória para testes.

    Não persiste nada - apenas simula o comportamento. Os
    repositórios em memória não são revertidos no rollback, por isso
    `atomic` é False.

    Example:
        uow = InMemoryUnitOfWork()
        with uow:
            uow.publish_event(event)

        assert uow.committed
        assert len(uow.published_events) == 1
    """

    atomic = False

    def __init__(self):
        super().__init__()
        self._committed = False
        self._rolled_back = False
        self._published_events: List[DomainEvent] = []

    def _begin_transaction(self) -> None:
        pass

    def commit(self) -> None:
        self._committed = True
        self._published_events.extend(self._events)
        self.clear_events()

    def rollback(self) -> None:
        self._rolled_back = True
        self.clear_events()

    @property
    def committed(self) -> bool:
        return self._committed

    @property
    def rolled_back(self) -> bool:
        return self._rolled_back

    @property
    def published_events(self) -> List[DomainEvent]:
        """Eventos que foram 'publicados' após commit."""
        return self._published_events

    def reset(self) -> None:
        """Reset para próximo teste."""
        self._committed = False
        self._rolled_back = False
        self._published_events.clear()
        self.clear_events()
