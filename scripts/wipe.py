from app.db.session import engine, Session, init_db

from app.db.seed import wipe_all


def run_wipe():
    init_db()
    with Session(engine) as session:
        deleted_rolls, deleted_games = wipe_all(session)
    print(f"✅ {deleted_rolls} lancers supprimés")
    print(f"✅ {deleted_games} parties supprimées")
    print('💡 Lance "python -m scripts.seed" pour repeupler avec des données d\'exemple')


if __name__ == "__main__":
    run_wipe()
