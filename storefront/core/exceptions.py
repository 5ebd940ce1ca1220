"""业务异常定义

每个异常都带有 HTTP 状态码和错误码，由 main.py 中的全局异常处理器
统一渲染为 ``{"error": {"issues": [{"code": ..., "message": ...}]}}``。
"""


class StorefrontError(Exception):
    """业务异常基类（默认视为内部错误）"""

    status_code = 500
    code = "internal_server_error"

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
        self.message = message

    def to_issue(self) -> dict:
        return {"code": self.code, "message": self.message}


class InvalidRequest(StorefrontError):
    """客户端请求参数错误"""

    status_code = 400
    code = "invalid_request"


class NotFound(StorefrontError):
    status_code = 404
    code = "not_found"


class ConflictError(StorefrontError):
    """业务冲突：库存不足、引用无法解析等

    对外仍按 500 返回，错误码区分具体原因。
    """

    status_code = 500
    code = "conflict"


class InsufficientStock(ConflictError):
    code = "insufficient_stock"

    def __init__(self, product_id: int):
        super().__init__(f"Insufficient stock for product ID {product_id}")
        self.product_id = product_id


class PaymentMethodUnresolvable(ConflictError):
    code = "payment_method_unresolvable"


class ReferenceNotFound(ConflictError):
    code = "reference_not_found"


class MaxPaymentMethodsReached(InvalidRequest):
    code = "max_payment_methods_reached"

    def __init__(self, limit: int):
        super().__init__(f"You can only have up to {limit} payment methods")
        self.limit = limit
