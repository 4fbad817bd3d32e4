from typing import Optional

from shopcart.services.cart import CartOperation, CartOutcome, CartResult

OUT_OF_STOCK_MESSAGE = "Quantidade solicitada fora de estoque"

FAILURE_MESSAGES = {
    CartOperation.ADD: "Erro na adição do produto",
    CartOperation.REMOVE: "Erro na remoção do produto",
    CartOperation.UPDATE_AMOUNT: "Erro na alteração de quantidade do produto",
}


def notification_for(result: CartResult) -> Optional[str]:
    """User-facing message for a cart operation, or None when there is nothing to say."""
    if result.ok:
        return None
    if result.outcome == CartOutcome.OUT_OF_STOCK:
        return OUT_OF_STOCK_MESSAGE
    return FAILURE_MESSAGES[result.operation]
