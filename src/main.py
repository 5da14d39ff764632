import sys
import logging
from decimal import Decimal

from payments_engine import PaymentsEngine

logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s: %(message)s",
    stream=sys.stderr,
)

REPORT_HEADER = "client,available,held,total,locked"


def format_decimal(value: Decimal) -> str:
    """Format an already rounded decimal with exactly 4 decimal places."""
    return f"{value:.4f}"


def main():
    if len(sys.argv) < 2:
        print("Missing filepath argument", file=sys.stderr)
        print("Usage: payments <input.csv>", file=sys.stderr)
        sys.exit(1)

    filepath = sys.argv[1]
    engine = PaymentsEngine()
    try:
        engine.process_file(filepath)
    except OSError as e:
        print(f"Error: cannot open {filepath}: {e.strerror or e}", file=sys.stderr)
        sys.exit(1)

    print(REPORT_HEADER)
    for row in engine.report():
        print(
            f"{row.client_id},"
            f"{format_decimal(row.available)},"
            f"{format_decimal(row.held)},"
            f"{format_decimal(row.total)},"
            f"{str(row.locked).lower()}"
        )


if __name__ == "__main__":
    main()
