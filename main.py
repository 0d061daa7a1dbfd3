import sys
import json
import logging
import argparse
from decimal import Decimal

from core.config_loader import load_config, configure_logging
from core.app_context import AppContext
from core.exceptions import ServiceException
from core.models.requests import LearnerSearchRequest
from database.init_db import init_db

logger = logging.getLogger(__name__)


def _json_default(value):
    # Decimal and datetime values
    return str(value)


def run_search(context: AppContext, args) -> int:
    criteria = {
        "min_average_mark": args.min_average,
        "grade_level": args.grade_level,
        "year": args.year,
        "location": args.location,
        "max_household_income": args.max_income,
        "subject_name": args.subject,
        "min_subject_mark": args.min_subject_mark,
    }
    request = LearnerSearchRequest(**{k: v for k, v in criteria.items() if v is not None})

    results = context.search_service.search_learners(args.provider_id, request)
    print(json.dumps(
        [r.model_dump(by_alias=True) for r in results],
        indent=2,
        default=_json_default
    ))
    logger.info(f"Search returned {len(results)} learners")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description='Bursary matching engine')
    parser.add_argument('--config', default='config.yaml')
    subparsers = parser.add_subparsers(dest='command', required=True)

    subparsers.add_parser('init-db', help='Create database tables')

    search = subparsers.add_parser('search', help='Rank learners for a provider')
    search.add_argument('--provider-id', type=int, required=True)
    search.add_argument('--min-average', type=Decimal)
    search.add_argument('--grade-level', type=int)
    search.add_argument('--year', type=int)
    search.add_argument('--location')
    search.add_argument('--max-income', type=Decimal)
    search.add_argument('--subject')
    search.add_argument('--min-subject-mark', type=Decimal)

    args = parser.parse_args()

    config = load_config(args.config)
    configure_logging(config.logging)
    context = AppContext.build(config)

    try:
        if args.command == 'init-db':
            init_db()
            return 0
        return run_search(context, args)
    except ServiceException as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
