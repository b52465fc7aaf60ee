import argparse
import logging
import sys

from matrixquiz.cli.export_commands import handle_export, register_export_commands
from matrixquiz.cli.generate_commands import handle_generate, handle_similar, register_generate_commands
from matrixquiz.cli.matrix_commands import (
    handle_group_spec,
    handle_matrix_add,
    handle_matrix_set,
    handle_matrix_totals,
    register_matrix_commands,
)
from matrixquiz.config import load_config, setup_logging
from matrixquiz.errors import MatrixQuizError

logger = logging.getLogger(__name__)

HANDLERS = {
    "matrix-totals": handle_matrix_totals,
    "matrix-add": handle_matrix_add,
    "matrix-set": handle_matrix_set,
    "group-spec": handle_group_spec,
    "generate": handle_generate,
    "similar": handle_similar,
    "export": handle_export,
}


def build_parser():
    parser = argparse.ArgumentParser(description="MatrixQuiz CLI.")
    parser.add_argument("--config", default="config.yaml", help="Path to config.yaml.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    register_matrix_commands(subparsers)
    register_generate_commands(subparsers)
    register_export_commands(subparsers)
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    config = load_config(args.config)
    setup_logging(config)

    try:
        return HANDLERS[args.command](config, args)
    except FileNotFoundError as e:
        print(f"Error: {e.filename} not found.")
        return 1
    except MatrixQuizError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
