"""List command implementation.

Shows the packages recorded in the install ledger.
"""

from spm.cli.common import load_settings, open_ledger
from spm.core.ledger import LedgerError
from spm.utils.formatting import (
    console,
    create_package_table,
    format_size,
    print_info,
    print_warning,
)


def list_packages() -> None:
    """List installed packages."""
    settings = load_settings()
    ledger = open_ledger(settings)

    names = ledger.list_packages()
    if not names:
        print_info("No packages installed.")
        return

    table = create_package_table()
    for name in names:
        try:
            record = ledger.load(name)
        except LedgerError as e:
            print_warning(str(e))
            continue
        table.add_row(
            name,
            record.destination,
            str(record.tree.file_count()),
            format_size(record.tree.total_size()),
        )

    console.print(table)
    console.print(f"\n[dim]{len(names)} package(s) in {ledger.ledger_dir}[/dim]")
