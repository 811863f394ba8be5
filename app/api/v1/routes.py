from fastapi import APIRouter
from app.api.v1.endpoints import (
    aliases,
    auth,
    calibration_missions,
    devices,
    doc_files,
    forum_posts,
    forum_threads,
    forums,
    lantern,
    messages,
    rooms,
    teams,
    transactions,
    trigger_events,
    users,
    wallets,
)

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(aliases.router, prefix="/aliases", tags=["aliases"])
router.include_router(teams.router, prefix="/teams", tags=["teams"])
router.include_router(wallets.router, prefix="/wallets", tags=["wallets"])
router.include_router(transactions.router, prefix="/transactions", tags=["transactions"])
router.include_router(devices.router, prefix="/devices", tags=["devices"])
router.include_router(forums.router, prefix="/forums", tags=["forums"])
router.include_router(forum_threads.router, prefix="/forumThreads", tags=["forums"])
router.include_router(forum_posts.router, prefix="/forumPosts", tags=["forums"])
router.include_router(trigger_events.router, prefix="/triggerEvents", tags=["triggerEvents"])
router.include_router(lantern.router, tags=["lantern"])
router.include_router(calibration_missions.router, prefix="/calibrationMissions", tags=["calibrationMissions"])
router.include_router(rooms.router, prefix="/rooms", tags=["rooms"])
router.include_router(messages.router, prefix="/messages", tags=["rooms"])
router.include_router(doc_files.router, prefix="/docFiles", tags=["docFiles"])
