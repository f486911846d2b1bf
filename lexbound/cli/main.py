"""Command-line interface for one-shot constrained generation."""

import argparse
import asyncio
import json
import logging
import sys

from lexbound.core.context_assembler import RetrievalController
from lexbound.core.errors import CompletionTransportError, InputError
from lexbound.core.generation_service import GenerationService, build_service, check_request
from lexbound.core.instruction_compiler import compile_instructions
from lexbound.lib.config import ConfigLoader
from lexbound.lib.logger import setup_logging
from lexbound.models.generation import GenerationRequest, GenerationStatus
from lexbound.storage.knowledge_base_loader import KnowledgeBaseLoadError, load_knowledge_base

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_NOT_VALIDATED = 1
EXIT_INPUT_ERROR = 2
EXIT_TRANSPORT_ERROR = 3


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lexbound",
        description="Answer a legal query using only the authorities in a knowledge base",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""Examples:
  lexbound --kb outline.bset "When is a warrantless search reasonable?"
  lexbound --kb outline.bset --context-only "exigent circumstances"
        """,
    )
    parser.add_argument("query", help="Natural-language query")
    parser.add_argument("--kb", required=True, help="Knowledge base file (.bset, .json, .yaml)")
    parser.add_argument("--target-node", help="Taxonomy node id (skips node selection)")
    parser.add_argument("--max-iterations", type=int, help="Maximum generation attempts")
    parser.add_argument("--system-instructions", help="Text prepended to the compiled instructions")
    parser.add_argument("--config", help="Path to lexbound.yaml")
    parser.add_argument(
        "--context-only",
        action="store_true",
        help="Print the authorized context and instructions without calling a model",
    )
    parser.add_argument("--json", action="store_true", help="Print the full result as JSON")
    parser.add_argument("--debug", action="store_true", help="Enable verbose logging")
    return parser


def show_context(config: ConfigLoader, request: GenerationRequest) -> int:
    check_request(request)
    retrieval = RetrievalController(config.get_retrieval_settings().node_threshold)
    context = retrieval.build_context(
        request.query, request.knowledge_base, request.target_node_id
    )
    print(json.dumps(context.to_dict(), indent=2, ensure_ascii=False))
    print()
    print(
        compile_instructions(
            context,
            request.query,
            assistant_name=config.get_generation_settings().assistant_name,
            preamble=request.system_instructions,
        )
    )
    return EXIT_OK


async def run_generation(
    service: GenerationService, request: GenerationRequest, as_json: bool
) -> int:
    result = await service.generate(request)

    if as_json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    elif result.status == GenerationStatus.INSUFFICIENT_AUTHORITY:
        print(f"No authorities in the knowledge base cover '{result.authorized_context.target_node.title}'.")
    else:
        print(result.generated_text)
        print()
        print(f"[{result.status.value} after {result.iterations} attempt(s)]")
        for check in result.validation_report.checks:
            print(f"  {check.check_type.value}: {check.status.value} - {check.details}")

    return EXIT_OK if result.status == GenerationStatus.VALIDATED else EXIT_NOT_VALIDATED


async def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(log_level="DEBUG" if args.debug else "INFO", quiet=not args.debug)
    config = ConfigLoader(config_path=args.config)

    try:
        request = GenerationRequest(
            query=args.query,
            knowledge_base=load_knowledge_base(args.kb),
            target_node_id=args.target_node,
            max_iterations=args.max_iterations,
            system_instructions=args.system_instructions,
        )
        if args.context_only:
            return show_context(config, request)

        service, connector = build_service(config)
        try:
            return await run_generation(service, request, args.json)
        finally:
            await connector.close()

    except (InputError, KnowledgeBaseLoadError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_INPUT_ERROR
    except CompletionTransportError as e:
        print(f"Model call failed: {e}", file=sys.stderr)
        return EXIT_TRANSPORT_ERROR


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
