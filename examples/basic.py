# mongo-entity examples

# Select a part of the code and execute it as a cell, or run the whole file.
# Use the comments as cell definitions

# Load requirements

import asyncio
import logging

from dotenv import load_dotenv

from mongo_entity import ClientConfig, EntityClient, ErrorMap, MongoEntityError

# Load environment from .env (MONGO_HOSTS, MONGO_USER, MONGO_PASSWORD, MONGO_DATABASE, ...)
load_dotenv()
logging.basicConfig(level=logging.INFO)

config = ClientConfig.from_env()

# Hide MongoDB wording from the application
errors = ErrorMap({"E11000 duplicate key": "room already exists"})


async def create_rooms(client: EntityClient):
    created = await client.create("rooms", "306", {"RoomNum": "306", "BedSize": "Twin"})
    print("Room created:", created)

    await client.create("rooms", "307", {"RoomNum": "307", "BedSize": "Queen"})


async def get_rooms(client: EntityClient):
    for room in await client.read_all("rooms"):
        print(room["key"], room["BedSize"])


async def get_room(client: EntityClient):
    room = await client.read("rooms", "306")
    print(room)


async def select_twins(client: EntityClient):
    for room in await client.find("rooms", "BedSize", "Twin"):
        print(room)


async def update_room(client: EntityClient):
    await client.update("rooms", "306", {"BedSize": "King"})
    print("Room updated:", await client.read("rooms", "306"))


async def delete_rooms(client: EntityClient):
    for key in ("306", "307"):
        await client.delete("rooms", key)
    print("Rooms deleted")


async def main():
    async with EntityClient(config, errors) as client:
        try:
            await create_rooms(client)
            await get_rooms(client)
            await get_room(client)
            await select_twins(client)
            await update_room(client)
            await delete_rooms(client)
        except MongoEntityError as e:
            print("Failed:", e)


if __name__ == "__main__":
    asyncio.run(main())
