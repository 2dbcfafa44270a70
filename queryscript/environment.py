import logging
from typing import Any, Dict, Mapping, Optional

from .builtin_function import NativeFunction
from .errors import VariableNotDefined

logger = logging.getLogger(__name__)


class Environment:
    """Mapping from identifiers to values for one program evaluation.

    The environment is flat: there is no block scoping, so an assignment
    anywhere is visible to every later statement.
    """

    def __init__(self, natives: Optional[Mapping[str, NativeFunction]] = None):
        self.values: Dict[str, Any] = {}
        if natives:
            self.values.update(natives)

    def get(self, name: str, span: Optional[Any] = None) -> Any:
        if name in self.values:
            return self.values[name]
        raise VariableNotDefined(name, span)

    def set(self, name: str, value: Any):
        logger.debug("bind %s = %r", name, value)
        self.values[name] = value
