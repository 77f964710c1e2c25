import functools
import logging
from typing import Dict, Optional, Type

from utils.exceptions import ElementClassifierException

ErrorMap = Dict[Type[BaseException], Type[ElementClassifierException]]


def _resolve_error_type(error: BaseException, error_type: Type[ElementClassifierException],
                        translate: Optional[ErrorMap]) -> Type[ElementClassifierException]:
    # First matching entry wins, so list narrower builtins before broader ones.
    for builtin, project_error in (translate or {}).items():
        if isinstance(error, builtin):
            return project_error
    return error_type


def handle_engine_errors(operation_name: str,
                         error_type: Type[ElementClassifierException] = ElementClassifierException,
                         translate: Optional[ErrorMap] = None):
    """
    Decorator giving engine operations one error contract.

    Project exceptions raised inside the operation propagate unchanged. Any
    other exception is logged with its traceback and re-raised as a project
    exception chained to the original: the type listed for it in `translate`
    if one matches, else `error_type`.

    Example:
        @handle_engine_errors("Model Saving", ModelPersistenceError)
        def save(self): ...
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except ElementClassifierException:
                raise
            except Exception as e:
                logger = args[0].logger if args and hasattr(args[0], 'logger') else logging.getLogger()
                logger.error(f"{operation_name} failed: {e}", exc_info=True)
                wrapped = _resolve_error_type(e, error_type, translate)
                raise wrapped(f"{operation_name} failed: {str(e)}") from e
        return wrapper
    return decorator
