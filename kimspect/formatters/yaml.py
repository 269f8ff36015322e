import yaml as yaml_module

from kimspect.core.abstract import formatters
from kimspect.core.models.result import Result


@formatters.register()
def yaml(result: Result) -> str:
    return yaml_module.dump(result.records(), sort_keys=False)
