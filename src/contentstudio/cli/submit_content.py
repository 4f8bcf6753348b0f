"""CLI for submitting lesson content through the mutation pipeline."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from contentstudio.errors import ContentStudioError
from contentstudio.generators.tts_client import OpenAITTSClient
from contentstudio.models.content import GenerationMethod
from contentstudio.models.course import Topic
from contentstudio.pipeline.orchestrator import MutationOrchestrator
from contentstudio.services.content_history import ContentHistoryService
from contentstudio.storage.json_store import JsonContentStore
from contentstudio.utils.llm_client import LLMClient
from contentstudio.utils.logging_config import configure_logging
from contentstudio.validators.language_detector import LanguageDetector, LLMLanguageDetector
from contentstudio.validators.quality_judge import LLMQualityJudge

logger = logging.getLogger(__name__)

load_dotenv()


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Create or update a topic's content through the language, quality and audio gates"
    )

    parser.add_argument("--topic-id", type=int, required=True, help="Topic that owns the content")
    parser.add_argument(
        "--content-type",
        required=True,
        help="Content type id or name (e.g. 1, 'text', 2, 'code', 'presentation')",
    )
    parser.add_argument(
        "--data-file",
        type=Path,
        required=True,
        help="JSON file with the content_data payload",
    )
    parser.add_argument(
        "--generation-method",
        default=GenerationMethod.MANUAL.value,
        choices=[method.value for method in GenerationMethod],
        help="How the content was produced (default: manual)",
    )

    # Topic registration for stores that do not know the topic yet
    parser.add_argument("--topic-name", help="Register or rename the topic")
    parser.add_argument("--topic-language", help="Topic language (e.g. 'en', 'Hebrew')")
    parser.add_argument("--skills", nargs="*", help="Topic skills used by the quality check")

    parser.add_argument(
        "--store",
        type=Path,
        help="JSON store file (default: CONTENT_STORE_PATH env var or content_store.json)",
    )
    parser.add_argument(
        "--skip-quality",
        action="store_true",
        help="Do not configure the LLM judge (only valid for ai_assisted submissions)",
    )
    parser.add_argument("--no-audio", action="store_true", help="Do not generate narration audio")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    parser.add_argument("--json-logs", action="store_true", help="Emit logs as JSON lines")

    args = parser.parse_args(argv)
    if args.skip_quality and GenerationMethod(args.generation_method).requires_quality_gate:
        parser.error("--skip-quality is only allowed with --generation-method ai_assisted")
    return args


def register_topic(store: JsonContentStore, args: argparse.Namespace) -> None:
    """Create or update the topic from command line options."""
    if not (args.topic_name or args.topic_language or args.skills):
        return

    existing = store.topics.find_by_id(args.topic_id)
    values = existing.model_dump() if existing else {"topic_id": args.topic_id}
    if args.topic_name:
        values["topic_name"] = args.topic_name
    if args.topic_language:
        values["language"] = args.topic_language
    if args.skills:
        values["skills"] = args.skills
    store.topics.add(Topic(**values))
    logger.info(f"Registered topic {args.topic_id}")


def build_orchestrator(store: JsonContentStore, args: argparse.Namespace) -> MutationOrchestrator:
    """Wire collaborators; LLM clients are only built when the gates need them."""
    quality_service = None
    detector = LanguageDetector()
    if not args.skip_quality and GenerationMethod(args.generation_method).requires_quality_gate:
        llm_client = LLMClient()
        quality_service = LLMQualityJudge(
            llm_client=llm_client,
            content_repository=store.content,
            topic_repository=store.topics,
            quality_check_repository=store.quality_checks,
            course_repository=store.courses,
        )
        detector = LanguageDetector(ai_detector=LLMLanguageDetector(llm_client))

    audio_service = None if args.no_audio else OpenAITTSClient()

    return MutationOrchestrator(
        content_repository=store.content,
        topic_repository=store.topics,
        course_repository=store.courses,
        quality_service=quality_service,
        history_service=ContentHistoryService(store.content, store.history),
        audio_service=audio_service,
        language_detector=detector,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for content submission CLI."""
    args = parse_args(argv)
    configure_logging(level=args.log_level.upper(), json_format=args.json_logs)

    try:
        with open(args.data_file, "r", encoding="utf-8") as f:
            content_data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Could not read content data from {args.data_file}: {e}")
        return 1

    store = JsonContentStore(args.store)
    register_topic(store, args)

    try:
        orchestrator = build_orchestrator(store, args)
    except Exception as e:
        logger.error(f"Failed to initialize components: {e}")
        return 1

    submission = {
        "topic_id": args.topic_id,
        "content_type_id": args.content_type,
        "content_data": content_data,
        "generation_method_id": args.generation_method,
    }

    try:
        content = orchestrator.submit(submission, generate_audio=not args.no_audio)
    except ContentStudioError as e:
        store.save()
        error = e.to_dict()
        error["status_messages"] = e.status_messages
        print(json.dumps({"error": error}, indent=2, ensure_ascii=False, default=str), file=sys.stderr)
        return 1

    store.save()
    output = content.to_record()
    output["status_messages"] = content.status_messages
    print(json.dumps(output, indent=2, ensure_ascii=False, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
