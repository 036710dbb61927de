# utils/seed_db.py
"""
Тестовые данные для разработки. Повторный запуск не создаёт дублей:
пользователи upsert-ятся по oid, лайки — по паре, матчи и интересы — по
уникальным ключам, сообщения вставляются только если такого ещё нет.

    python -m utils.seed_db
"""
import asyncio
import logging
from dataclasses import dataclass

from sqlalchemy import select

from core.database import AsyncSessionLocal, engine
from models.base import Base
from models.message import Message
from services.interests import set_user_interests
from services.likes import submit_decision
from services.oauth import IdTokenClaims, upsert_user

log = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO)


@dataclass(frozen=True)
class MockUser:
    oid: str
    email: str
    display_name: str
    full_name: str
    age: int
    is_rso: bool
    major: str
    bio: str
    interests: tuple


MOCK_USERS = [
    MockUser("seed-oid-001", "alice@university.edu", "alice", "Alice Nguyen", 20, False,
             "Computer Science", "Coffee-fuelled coder who loves hiking and terrible puns.",
             ("Hiking", "Coffee", "Video Games", "Open Source")),
    MockUser("seed-oid-002", "bob@university.edu", "bob", "Bob Martinez", 22, True,
             "Mechanical Engineering", "Robotics club president. Can fix (and break) almost anything.",
             ("Robotics", "3D Printing", "Cycling", "Coffee")),
    MockUser("seed-oid-003", "carol@university.edu", "carol", "Carol Zhang", 21, False,
             "Biology", "Pre-med student, amateur photographer, and plant parent.",
             ("Photography", "Hiking", "Cooking", "Reading")),
    MockUser("seed-oid-004", "david@university.edu", "david", "David Osei", 23, True,
             "Economics", "Aspiring economist who moonlights as a jazz drummer.",
             ("Jazz", "Economics", "Chess", "Cycling")),
    MockUser("seed-oid-005", "eve@university.edu", "eve", "Eve Kowalski", 19, False,
             "Psychology", "Bookworm and aspiring therapist. Ask me about cognitive biases.",
             ("Reading", "Psychology", "Yoga", "Cooking")),
    MockUser("seed-oid-006", "frank@university.edu", "frank", "Frank Delacroix", 24, False,
             "Fine Arts", "Painter, illustrator, and chronic overthinker.",
             ("Painting", "Photography", "Chess", "Video Games")),
    MockUser("seed-oid-007", "grace@university.edu", "grace", "Grace Kim", 20, True,
             "Data Science", "Numbers person by day, K-drama binge-watcher by night.",
             ("Open Source", "Yoga", "Cooking", "Chess")),
    MockUser("seed-oid-008", "henry@university.edu", "henry", "Henry Okafor", 22, False,
             "Physics", "Astrophysics enthusiast who also happens to love reggae music.",
             ("Jazz", "Cycling", "3D Printing", "Reading")),
]

# (liker, liked, is_like) — индексы в MOCK_USERS.
# Взаимные лайки (0,1), (2,3), (4,5), (6,7) становятся матчами.
MOCK_LIKES = [
    (0, 1, True), (1, 0, True),
    (2, 3, True), (3, 2, True),
    (4, 5, True), (5, 4, True),
    (6, 7, True), (7, 6, True),
    (0, 2, True),
    (1, 3, False),
    (3, 5, True),
    (2, 6, False),
]

MOCK_MESSAGES = [
    (0, 1, "Hey! I saw you're in robotics, that's awesome."),
    (1, 0, "Yeah! And I heard you're into open source. Any cool projects lately?"),
    (2, 3, "Hi David! Big fan of jazz myself."),
    (3, 2, "Oh really? Have you been to the Thursday night sessions on campus?"),
    (4, 5, "Your paintings look incredible from your profile!"),
    (6, 7, "Fellow cyclist here. Do you ride the river trail?"),
    (7, 6, "Every Sunday morning! The sunrise there is unreal."),
]


async def seed():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as session:
        # 1. Пользователи и интересы
        user_ids = []
        for mock in MOCK_USERS:
            user = await upsert_user(
                session,
                IdTokenClaims(oid=mock.oid, email=mock.email, name=mock.display_name),
            )
            user.full_name = mock.full_name
            user.age = mock.age
            user.is_rso = mock.is_rso
            user.major = mock.major
            user.bio = mock.bio
            await set_user_interests(session, user.id, mock.interests)
            await session.commit()
            user_ids.append(user.id)
            log.info("user %r → id %s", mock.display_name, user.id)

        # 2. Лайки; матчи формируются так же, как в API
        matches = 0
        for liker, liked, is_like in MOCK_LIKES:
            _, result = await submit_decision(session, user_ids[liker], user_ids[liked], is_like)
            if result is not None and result.created:
                matches += 1
        log.info("seeded %s decisions, %s new matches", len(MOCK_LIKES), matches)

        # 3. Сообщения
        for sender, recipient, content in MOCK_MESSAGES:
            exists = await session.execute(
                select(Message.id).where(
                    Message.sender_id == user_ids[sender],
                    Message.recipient_id == user_ids[recipient],
                    Message.content == content,
                )
            )
            if exists.first():
                continue
            session.add(Message(
                sender_id=user_ids[sender],
                recipient_id=user_ids[recipient],
                content=content,
            ))
        await session.commit()

    await engine.dispose()
    log.info("DB seeded successfully")


if __name__ == "__main__":
    asyncio.run(seed())
