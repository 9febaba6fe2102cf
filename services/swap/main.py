import sys

from loguru import logger

from raydium_swap_engine.config import load_settings
from raydium_swap_engine.errors import SwapError
from raydium_swap_engine.execution.swap_executor import SwapExecutor


def main() -> int:
    executor = None
    try:
        settings = load_settings()
        logger.remove()
        logger.add(lambda m: print(m, end=""), level=settings.log_level)

        executor = SwapExecutor.create(settings)
        report = executor.run()
    except SwapError as e:
        if executor is None:
            logger.error("Startup failed: {}", e)
        print(f"swap failed: {e}", file=sys.stderr)
        if executor is not None:
            for r in executor.report.legs:
                logger.warning("Leg {} {} ({})", r.index, r.status.value, r.signature)
        return 1

    logger.info(
        "Swap complete: {} leg(s), {} finalized", len(report.legs), report.finalized
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
