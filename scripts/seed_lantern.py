from app.core.config import get_settings
from app.core.database import SessionLocal
from app.models import LanternRound, LanternStation, LanternTeam
from app.services.lantern import ROUND_ID


SAMPLE_STATIONS = [
    {"station_id": 1, "station_name": "North relay"},
    {"station_id": 2, "station_name": "Harbour mast"},
    {"station_id": 3, "station_name": "Old observatory"},
    {"station_id": 4, "station_name": "Market tower"},
]

SAMPLE_TEAMS = [
    {"team_id": 1, "team_name": "Lanterns of Dusk", "short_name": "LOD"},
    {"team_id": 2, "team_name": "Signal Keepers", "short_name": "SIG"},
]


def main():
    settings = get_settings()
    db = SessionLocal()
    try:
        for station in SAMPLE_STATIONS:
            existing = db.query(LanternStation).filter(LanternStation.station_id == station["station_id"]).first()
            if not existing:
                db.add(LanternStation(signal_value=settings.lantern_signal_default, is_active=True, **station))
        for team in SAMPLE_TEAMS:
            existing = db.query(LanternTeam).filter(LanternTeam.team_id == team["team_id"]).first()
            if not existing:
                db.add(LanternTeam(is_active=True, **team))
        if not db.query(LanternRound).filter(LanternRound.id == ROUND_ID).first():
            db.add(LanternRound(id=ROUND_ID, is_active=False))
        db.commit()
    finally:
        db.close()


if __name__ == "__main__":
    main()
