import logging
import sys
import traceback
from typing import Any, Optional
from parser import parse
from executor import Environment, evaluate
from display import format_expression, format_result
from errors import MathError
from config_manager import Limits, load_setting_value

logger = logging.getLogger(__name__)

def execute(
    expression: str,
    env: Optional[Environment] = None,
    limits: Optional[Limits] = None
) -> Any:
    if env is None:
        env = Environment()
    if limits is None:
        limits = Limits.from_settings()
    return evaluate(parse(expression, env, limits), env, limits)

def _print_bindings(env: Environment, max_digits: int) -> None:
    for name, value in env.items():
        print(f"{name} := {format_expression(value, max_digits)}")

def main() -> None:
    settings = load_setting_value("all")
    logging.basicConfig(level=settings["log_level"])
    limits = Limits.from_settings(settings)
    prompt = settings["prompt"]
    max_digits = settings["max_decimal_digits"]
    # results with thousands of digits still print in full
    sys.set_int_max_str_digits(0)
    env = Environment()
    while True:
        try:
            line = input(prompt)
        except (EOFError, KeyboardInterrupt):
            print()
            break
        if not line.strip():
            continue
        if line.strip() == 'vars':
            _print_bindings(env, max_digits)
            continue
        try:
            expr = parse(line, env, limits)
            if settings["echo_parsed"]:
                print(f" > {format_expression(expr, max_digits)}")
            result = evaluate(expr, env, limits)
            print(format_result(result, max_digits))
        except MathError as e:
            logger.debug("%r failed", line, exc_info=True)
            print(f"Error: {e}")
        except RecursionError as e:
            print(' '.join(traceback.format_exception_only(e)), end="")

if __name__ == '__main__':
    main()
