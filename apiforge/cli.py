"""API Forge CLI tool (apiforge)."""

import typer

app = typer.Typer(name="apiforge", help="API Forge CLI")
db_app = typer.Typer(help="Database management commands")
models_app = typer.Typer(help="Model definition commands")
app.add_typer(db_app, name="db")
app.add_typer(models_app, name="models")


@db_app.command("init")
def db_init():
    """Create the base tables (users, model_definitions) if they don't exist."""
    from apiforge.db.session import engine
    from apiforge.db.setup import create_base_tables

    create_base_tables(engine)
    typer.echo("✅ Database tables created")


@db_app.command("seed")
def db_seed():
    """Create the default admin user."""
    from apiforge.db.session import SessionLocal
    from apiforge.db.seeds.seed_admin import seed_admin

    db = SessionLocal()
    try:
        seed_admin(db)
    finally:
        db.close()
    typer.echo("✅ All seeds applied")


@db_app.command("clear")
def db_clear(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
):
    """Empty every model table and delete all users except the admin (DANGER)."""
    if not yes and not typer.confirm("⚠️  This will delete all model data and users. Continue?"):
        raise typer.Abort()
    from apiforge.db.session import SessionLocal
    from apiforge.db.setup import clear_data

    db = SessionLocal()
    try:
        result = clear_data(db)
    finally:
        db.close()
    for table in result["cleared_tables"]:
        typer.echo(f"✅ Cleared data from: {table}")
    for table in result["failed_tables"]:
        typer.echo(f"❌ Failed to clear: {table}", err=True)
    typer.echo(f"✅ Cleared {result['users_removed']} users (admin kept)")


@models_app.command("check")
def models_check():
    """Check that every stored model definition parses."""
    from apiforge.db.session import SessionLocal
    from apiforge.services.schema_store import check_definitions

    db = SessionLocal()
    try:
        report = check_definitions(db)
    finally:
        db.close()

    invalid = 0
    for entry in report:
        typer.echo(f"📋 Model: {entry['name']} (ID: {entry['id']})")
        if entry["valid"]:
            typer.echo(f"   ✅ valid, {entry['fields']} fields, RBAC {'present' if entry['rbac'] else 'missing'}")
        else:
            invalid += 1
            typer.echo(f"   ❌ invalid: {entry['error']}")
    if invalid:
        raise typer.Exit(code=1)


@app.command("serve")
def serve(
    host: str = typer.Option("0.0.0.0", help="Host"),
    port: int = typer.Option(8000, help="Port"),
    reload: bool = typer.Option(False, help="Auto-reload"),
):
    """Start the API server."""
    import uvicorn
    uvicorn.run("apiforge.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()
