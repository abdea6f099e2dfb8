from typing import Optional

import typer

from cityboard.domain import geohash
from cityboard.domain.models import DateRange, InvalidViewportError, Viewport
from cityboard.domain.zoom import precision_for_zoom
from cityboard.infra.database import get_engine
from cityboard.infra.db.events_repository import EventsRepository
from cityboard.jobs.generate_demo_events import generate_demo_events
from cityboard.services.map_pins import GeoClusterService, PinRetrievalService

app = typer.Typer(help="CLI for inspecting the event map aggregation")


def _viewport(min_lat: float, max_lat: float, min_lng: float, max_lng: float) -> Viewport:
    try:
        return Viewport(min_lat=min_lat, max_lat=max_lat, min_lng=min_lng, max_lng=max_lng)
    except InvalidViewportError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _categories(value: Optional[str]) -> list[str]:
    return [c.strip() for c in value.split(",") if c.strip()] if value else []


@app.command("geohash")
def cli_geohash(
    lat: float = typer.Option(..., help="Latitude"),
    lng: float = typer.Option(..., help="Longitude"),
    precision: int = typer.Option(8, min=1, max=12, help="Geohash length"),
):
    typer.echo(geohash.encode(lat, lng, precision))


@app.command("precision")
def cli_precision(zoom: int = typer.Option(..., help="Map zoom level")):
    typer.echo(str(precision_for_zoom(zoom)))


@app.command("clusters")
def cli_clusters(
    min_lat: float = typer.Option(...),
    max_lat: float = typer.Option(...),
    min_lng: float = typer.Option(...),
    max_lng: float = typer.Option(...),
    zoom: int = typer.Option(..., help="Map zoom level"),
    categories: Optional[str] = typer.Option(None, help="Comma-separated category ids"),
):
    viewport = _viewport(min_lat, max_lat, min_lng, max_lng)
    service = GeoClusterService(EventsRepository(get_engine()))
    clusters = service.get_clusters(viewport, zoom, _categories(categories), DateRange())
    if not clusters:
        typer.echo("No events in this viewport")
        raise typer.Exit(code=0)
    typer.echo("geohash\tcount\tlat\tlng")
    for cluster in sorted(clusters, key=lambda c: c.count, reverse=True):
        typer.echo(f"{cluster.geohash}\t{cluster.count}\t{cluster.lat:.5f}\t{cluster.lng:.5f}")


@app.command("pins")
def cli_pins(
    min_lat: float = typer.Option(...),
    max_lat: float = typer.Option(...),
    min_lng: float = typer.Option(...),
    max_lng: float = typer.Option(...),
    categories: Optional[str] = typer.Option(None, help="Comma-separated category ids"),
):
    viewport = _viewport(min_lat, max_lat, min_lng, max_lng)
    service = PinRetrievalService(EventsRepository(get_engine()))
    pins = service.get_pins(viewport, _categories(categories), DateRange())
    if not pins:
        typer.echo("No events in this viewport")
        raise typer.Exit(code=0)
    typer.echo("id\tlat\tlng")
    for pin in pins:
        typer.echo(f"{pin.id}\t{pin.lat:.5f}\t{pin.lng:.5f}")


@app.command("demo")
def cli_demo(
    city: str = typer.Option(..., help="City name"),
    lat: float = typer.Option(..., help="Center latitude"),
    lng: float = typer.Option(..., help="Center longitude"),
    days: int = typer.Option(7, help="Days ahead to fill"),
    per_day: int = typer.Option(10, help="Events per day"),
):
    generate_demo_events(city=city, lat=lat, lng=lng, days=days, per_day=per_day, engine=get_engine())


if __name__ == "__main__":
    app()
