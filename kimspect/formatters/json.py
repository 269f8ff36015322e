import json as json_module

from kimspect.core.abstract import formatters
from kimspect.core.models.result import Result


@formatters.register()
def json(result: Result) -> str:
    return json_module.dumps(result.records(), indent=2)
