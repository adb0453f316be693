#!/usr/bin/env python3
"""
Physio.Case — Інтерактивне інтерв'ю в консолі

Запуск:
    python scripts/run_interview.py
    python scripts/run_interview.py --knowledge-dir path/to/pack
    python scripts/run_interview.py --config config.yaml --verbose

Відповіді: y/n для так/ні, значення варіанту для multiple choice,
назва ділянки (ankle, shoulder, neck, ...) для вибору ділянки.
"""

import sys
import argparse
import logging
from pathlib import Path

# Додаємо корінь проекту до path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from physio_case.config import get_default_config, load_config
from physio_case.diagnosis_cycle import AssessmentOrchestrator
from physio_case.errors import PhysioCaseError
from physio_case.knowledge import load_knowledge_base
from physio_case.schemas import QuestionType


logger = logging.getLogger(__name__)


def ask(question) -> object:
    """Поставити питання в консолі і повернути відповідь у форматі API"""
    print(f"\n{question.text}")
    if question.type == QuestionType.MULTIPLE_CHOICE:
        for option in question.options:
            print(f"   [{option.value}] {option.text}")
        return input("> ").strip()
    if question.type == QuestionType.BODY_SELECTION:
        return input("Ділянка > ").strip()
    raw = input("(y/n) > ").strip().lower()
    if raw in ("y", "yes", "так"):
        return True
    if raw in ("n", "no", "ні"):
        return False
    return raw


def print_results(response):
    results = response.results
    print("\n" + "=" * 60)
    print(f" {results.diagnostic_summary}")
    print("=" * 60)
    for i, condition in enumerate(results.top_conditions, 1):
        print(f"  {i}. {condition.name}: {condition.probability:.0%} ({condition.confidence})")
    print(f"\n  Evidence: {results.evidence_quality}")
    if results.pain_source_summary:
        print(f"  Source:   {results.pain_source_summary}")

    if response.type == "referral":
        print(f"\n⚠ {response.message}")
        return

    recommendations = response.recommendations
    print(f"\n{recommendations.message}")
    for step in recommendations.next_steps:
        print(f"  • {step}")
    if recommendations.note:
        print(f"\n{recommendations.note}")


def main():
    parser = argparse.ArgumentParser(description='Physio.Case Interview')
    parser.add_argument('--knowledge-dir', default=None, help='Knowledge pack directory (default: bundled pack)')
    parser.add_argument('--config', default=None, help='YAML config file')
    parser.add_argument('--verbose', action='store_true', help='Debug logging')

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args.config) if args.config else get_default_config()
        kb = load_knowledge_base(args.knowledge_dir or config.knowledge_dir)
    except PhysioCaseError as e:
        print(f"❌ {e}")
        sys.exit(1)

    print("=" * 60)
    print("🩺 Physio.Case — Interview")
    print("=" * 60)

    orchestrator = AssessmentOrchestrator(kb, config)
    response = orchestrator.start()

    while response.type in ("question", "source_identified"):
        if response.type == "source_identified":
            print(f"\nℹ {response.message}")
        question = response.question
        response = orchestrator.answer(question.id, ask(question))

    print_results(response)
    logger.debug("Final session state: %s", orchestrator.session.to_dict())


if __name__ == "__main__":
    main()
