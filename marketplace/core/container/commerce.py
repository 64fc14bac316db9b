"""
Commerce Domain Container.

Single Responsibility: Wire all commerce domain dependencies.
"""

import logging
import httpx

from marketplace.clients import MidtransClient
from marketplace.config.settings import Settings
from marketplace.database import Database
from marketplace.domains.commerce.application.ports import (
    INotificationDispatcher,
    INotificationRepository,
    IPaymentGateway,
    IProofStorage,
    IUnitOfWork,
)
from marketplace.domains.commerce.application.use_cases import (
    AddToCartUseCase,
    CancelOrderUseCase,
    ClearCartUseCase,
    ConfirmStorePaymentUseCase,
    CreateOrderUseCase,
    CreatePaymentTransactionUseCase,
    GetCartUseCase,
    GetOrderDetailUseCase,
    GetOrderStatisticsUseCase,
    GetShopOrdersUseCase,
    GetUserOrdersUseCase,
    HandleGatewayNotificationUseCase,
    ListNotificationsUseCase,
    MarkNotificationReadUseCase,
    ReconcilePaymentStatusUseCase,
    RemoveCartItemUseCase,
    RetryPaymentTransactionUseCase,
    UpdateCartItemUseCase,
    UpdateOrderStatusUseCase,
)
from marketplace.domains.commerce.infrastructure import SQLAlchemyUnitOfWork
from marketplace.domains.commerce.infrastructure.repositories import SQLAlchemyNotificationRepository
from marketplace.domains.commerce.infrastructure.services import (
    MidtransPaymentGateway,
    NotificationDispatcher,
    ProofStorageService,
)

logger = logging.getLogger(__name__)


class CommerceContainer:
    """
    Commerce domain container.

    Holds the long-lived collaborators (database handle, gateway, notifier,
    proof storage) and builds use cases on demand.
    """

    def __init__(
        self,
        settings: Settings,
        database: Database,
        gateway: IPaymentGateway,
        notifier: INotificationDispatcher,
        storage: IProofStorage,
        notification_repository: INotificationRepository,
    ):
        self.settings = settings
        self.database = database
        self.gateway = gateway
        self.notifier = notifier
        self.storage = storage
        self.notification_repository = notification_repository

    @classmethod
    def build(
        cls,
        settings: Settings,
        database: Database,
        midtrans_client: MidtransClient,
        push_client: httpx.AsyncClient | None = None,
    ) -> "CommerceContainer":
        """Wire the production implementations."""
        notification_repository = SQLAlchemyNotificationRepository(database.session_factory)
        container = cls(
            settings=settings,
            database=database,
            gateway=MidtransPaymentGateway(midtrans_client),
            notifier=NotificationDispatcher(
                notification_repository,
                http_client=push_client,
                push_url=settings.NOTIFICATION_PUSH_URL,
            ),
            storage=ProofStorageService(
                storage_path=settings.PROOF_STORAGE_PATH,
                public_url_base=settings.PUBLIC_URL_BASE,
                allowed_extensions=settings.ALLOWED_PROOF_EXTENSIONS,
                max_file_size=settings.MAX_PROOF_FILE_SIZE,
            ),
            notification_repository=notification_repository,
        )
        logger.info("CommerceContainer initialized")
        return container

    # ==================== UNIT OF WORK ====================

    def uow_factory(self) -> IUnitOfWork:
        """Create a fresh unit of work."""
        return SQLAlchemyUnitOfWork(self.database.session_factory)

    # ==================== CART ====================

    def create_get_cart_use_case(self) -> GetCartUseCase:
        return GetCartUseCase(self.uow_factory)

    def create_add_to_cart_use_case(self) -> AddToCartUseCase:
        return AddToCartUseCase(self.uow_factory)

    def create_update_cart_item_use_case(self) -> UpdateCartItemUseCase:
        return UpdateCartItemUseCase(self.uow_factory)

    def create_remove_cart_item_use_case(self) -> RemoveCartItemUseCase:
        return RemoveCartItemUseCase(self.uow_factory)

    def create_clear_cart_use_case(self) -> ClearCartUseCase:
        return ClearCartUseCase(self.uow_factory)

    # ==================== ORDERS ====================

    def create_create_order_use_case(self) -> CreateOrderUseCase:
        """Create CreateOrderUseCase with dependencies."""
        return CreateOrderUseCase(uow_factory=self.uow_factory, notifier=self.notifier)

    def create_cancel_order_use_case(self) -> CancelOrderUseCase:
        return CancelOrderUseCase(uow_factory=self.uow_factory, notifier=self.notifier)

    def create_update_order_status_use_case(self) -> UpdateOrderStatusUseCase:
        return UpdateOrderStatusUseCase(uow_factory=self.uow_factory, notifier=self.notifier)

    def create_confirm_store_payment_use_case(self) -> ConfirmStorePaymentUseCase:
        """Create ConfirmStorePaymentUseCase with dependencies."""
        return ConfirmStorePaymentUseCase(
            uow_factory=self.uow_factory,
            storage=self.storage,
            notifier=self.notifier,
            max_files=self.settings.MAX_PROOF_FILES,
        )

    def create_get_user_orders_use_case(self) -> GetUserOrdersUseCase:
        return GetUserOrdersUseCase(self.uow_factory)

    def create_get_shop_orders_use_case(self) -> GetShopOrdersUseCase:
        return GetShopOrdersUseCase(self.uow_factory)

    def create_get_order_detail_use_case(self) -> GetOrderDetailUseCase:
        return GetOrderDetailUseCase(self.uow_factory)

    def create_get_order_statistics_use_case(self) -> GetOrderStatisticsUseCase:
        return GetOrderStatisticsUseCase(self.uow_factory)

    # ==================== PAYMENTS ====================

    def create_create_payment_transaction_use_case(self) -> CreatePaymentTransactionUseCase:
        """Create CreatePaymentTransactionUseCase with dependencies."""
        return CreatePaymentTransactionUseCase(
            uow_factory=self.uow_factory,
            gateway=self.gateway,
            frontend_base_url=self.settings.FRONTEND_BASE_URL,
            token_ttl=self.settings.snap_token_ttl,
        )

    def create_retry_payment_transaction_use_case(self) -> RetryPaymentTransactionUseCase:
        return RetryPaymentTransactionUseCase(
            uow_factory=self.uow_factory,
            gateway=self.gateway,
            frontend_base_url=self.settings.FRONTEND_BASE_URL,
            token_ttl=self.settings.snap_token_ttl,
        )

    def create_reconcile_payment_status_use_case(self) -> ReconcilePaymentStatusUseCase:
        return ReconcilePaymentStatusUseCase(
            uow_factory=self.uow_factory, gateway=self.gateway, notifier=self.notifier
        )

    def create_handle_gateway_notification_use_case(self) -> HandleGatewayNotificationUseCase:
        return HandleGatewayNotificationUseCase(
            uow_factory=self.uow_factory, gateway=self.gateway, notifier=self.notifier
        )

    # ==================== NOTIFICATIONS ====================

    def create_list_notifications_use_case(self) -> ListNotificationsUseCase:
        return ListNotificationsUseCase(self.notification_repository)

    def create_mark_notification_read_use_case(self) -> MarkNotificationReadUseCase:
        return MarkNotificationReadUseCase(self.notification_repository)
