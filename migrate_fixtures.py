import argparse
import sys

from dotenv import load_dotenv

# Load environment variables before the settings module is imported
load_dotenv()

from tourdesk.config.settings import settings  # noqa: E402
from tourdesk.services.migration_service import migrate_fixture  # noqa: E402
from tourdesk.storage import get_record_store  # noqa: E402


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Copy data/<table>.json fixtures into the record store")
    parser.add_argument("tables", nargs="+", help="tables to migrate, e.g. tours destinations users")
    parser.add_argument("--data-dir", default=settings.DATA_DIR, help="directory holding the fixture files")
    args = parser.parse_args(argv)

    if not settings.supabase_configured:
        print("Error: SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set in .env")
        return 1

    store = get_record_store(settings)
    failed = False
    for table in args.tables:
        try:
            report = migrate_fixture(store, table, args.data_dir)
        except (FileNotFoundError, ValueError) as e:
            print(f"❌ {table}: {e}")
            failed = True
            continue

        print(
            f"{table}: {report.migrated} migrated, {report.skipped} skipped, "
            f"{len(report.errors)} errors (of {report.total})"
        )
        for error in report.errors:
            print(f"   {error['id']}: {error['error']}")
        failed = failed or bool(report.errors)

    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
