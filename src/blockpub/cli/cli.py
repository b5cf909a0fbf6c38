"""CLI entrypoint: Typer app definition and command registration"""

import typer

from blockpub.cli.commands import (
    _settings,
    add_cmd,
    delete_cmd,
    edit_cmd,
    export_cmd,
    import_cmd,
    init_cmd,
    list_cmd,
    move_cmd,
    new_cmd,
    publish_cmd,
    remove_cmd,
    show_cmd,
    style_cmd,
    upload_cmd,
)
from blockpub.core.utils.logging import configure_logging


app = typer.Typer(name="blockpub", no_args_is_help=True, help="Block-based blog post and newsletter editor")


@app.callback()
def main() -> None:
    """Configure logging from settings before any command runs."""
    settings = _settings()
    configure_logging(settings.log_level, settings.log_file)


app.command(name="init")(init_cmd)
app.command(name="new")(new_cmd)
app.command(name="list")(list_cmd)
app.command(name="show")(show_cmd)
app.command(name="add")(add_cmd)
app.command(name="edit")(edit_cmd)
app.command(name="style")(style_cmd)
app.command(name="move")(move_cmd)
app.command(name="delete")(delete_cmd)
app.command(name="upload")(upload_cmd)
app.command(name="import")(import_cmd)
app.command(name="export")(export_cmd)
app.command(name="publish")(publish_cmd)
app.command(name="remove")(remove_cmd)
