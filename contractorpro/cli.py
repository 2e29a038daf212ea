"""ContractorPro CLI tool (contractorctl)."""

from datetime import date, datetime, timedelta, timezone
from typing import Optional

import typer

app = typer.Typer(name="contractorctl", help="ContractorPro CLI")
db_app = typer.Typer(help="Database management commands")
app.add_typer(db_app, name="db")


@db_app.command("create-tables")
def db_create_tables():
    """Create all tables from the SQLAlchemy models."""
    from contractorpro.db.base import Base
    from contractorpro.db.session import engine
    import contractorpro.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    typer.echo(f"✅ Created {len(Base.metadata.tables)} tables")


@db_app.command("seed")
def db_seed():
    """Seed the role/permission catalog and the admin account."""
    from contractorpro.db.session import SessionLocal
    from contractorpro.db.seeds.seed_roles import seed_roles
    from contractorpro.db.seeds.seed_admin import seed_admin

    db = SessionLocal()
    try:
        seed_roles(db)
        seed_admin(db)
    finally:
        db.close()
    typer.echo("✅ All seeds applied")


@app.command("snapshot")
def snapshot(
    day: Optional[str] = typer.Option(None, "--date", help="Day to snapshot (YYYY-MM-DD), defaults to yesterday UTC"),
):
    """Write one day of activity logs to object storage."""
    from contractorpro.db.session import SessionLocal
    from contractorpro.services.snapshot_service import snapshot_service
    from contractorpro.core.exceptions import SnapshotError

    if day:
        try:
            target = date.fromisoformat(day)
        except ValueError:
            raise typer.BadParameter(f"'{day}' is not a YYYY-MM-DD date", param_hint="--date")
    else:
        target = datetime.now(timezone.utc).date() - timedelta(days=1)

    db = SessionLocal()
    try:
        result = snapshot_service.create_snapshot_for_date(db, target)
    except SnapshotError as e:
        typer.echo(f"❌ {e.message}", err=True)
        raise typer.Exit(code=1)
    finally:
        db.close()
    typer.echo(f"✅ Wrote {result['key']} ({result['count']} entries)")


@app.command("serve")
def serve(
    host: str = typer.Option("0.0.0.0", help="Host"),
    port: int = typer.Option(8000, help="Port"),
    reload: bool = typer.Option(True, help="Auto-reload"),
):
    """Start the FastAPI development server."""
    import uvicorn
    uvicorn.run("contractorpro.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()
