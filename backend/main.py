from contextlib import asynccontextmanager
from fastapi import Depends, FastAPI, HTTPException, Query, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from datetime import date, timedelta
from typing import Optional
import asyncio
import logging
import uuid

from config import (
    BREAKDOWN_APPLY_COMPLETION_PAUSE_S,
    BREAKDOWN_APPLY_PACING_S,
    BREAKDOWN_DEBOUNCE_S,
    CORS_ORIGINS,
    LOG_LEVEL,
    SCHEDULE_APPLY_COMPLETION_PAUSE_S,
    SCHEDULE_APPLY_PACING_S,
)
from models import (
    CATEGORIES,
    ApplyRunStatus,
    BreakdownApplyRequest,
    BreakdownDraftRequest,
    BreakdownRequest,
    CategorizeRequest,
    ScheduleApplyRequest,
    ScheduleItem,
    ScheduleRequest,
    Task,
    TaskCreate,
    TaskUpdate,
)
from database import (
    StoreError,
    TaskNotFoundError,
    init_db,
    get_all_tasks,
    get_tasks_for_date,
    create_task_db,
    update_task_db,
    delete_task_db,
)
from classification import categorize, classify
from completion import TextCompletionClient
from debounce import DraftBreakdown
from generators import generate_breakdown, generate_schedule, generate_suggestions
from orchestrator import ApplySequence, RunState
from session import SessionContext, get_session

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(message)s"
)
logger = logging.getLogger(__name__)

# Finished runs kept around for status polling
MAX_FINISHED_RUNS = 50
# Idle draft previews kept per caller; the least recently used go first
MAX_IDLE_DRAFTS = 50

completer = TextCompletionClient()

apply_runs: dict[str, ApplySequence] = {}
drafts: dict[str, DraftBreakdown] = {}
_background_tasks: set[asyncio.Task] = set()


@asynccontextmanager
async def lifespan(_app: FastAPI):
    # Startup
    init_db()
    yield
    # Shutdown: stop timers, then close runs and wait for them to stop before their next item
    for draft in drafts.values():
        draft.cancel()
    for run in apply_runs.values():
        run.close()
    await asyncio.gather(*_background_tasks, return_exceptions=True)

app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StoreError)
async def store_error_handler(_request, exc: StoreError) -> JSONResponse:
    logger.error("Store failure: %s", exc)
    return JSONResponse(status_code=503, content={"detail": "Task store unavailable"})


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/tasks")
def get_tasks(
    category: Optional[str] = None,
    session: SessionContext = Depends(get_session),
) -> list[Task]:
    if category == "all":
        category = None
    if category is not None and category not in CATEGORIES:
        raise HTTPException(status_code=422, detail=f"Unknown category '{category}'")
    return get_all_tasks(session.user_id, category)


@app.get("/tasks/for-date")
def get_tasks_for_date_endpoint(
    target: date = Query(alias="date"),
    session: SessionContext = Depends(get_session),
) -> list[Task]:
    """Calendar day view."""
    return get_tasks_for_date(target.isoformat(), session.user_id)


async def add_task(task_data: TaskCreate, owner_id: Optional[str]) -> Task:
    """Resolve category/priority (explicit values win) and persist."""
    category, priority = await classify(completer, task_data.text, task_data.category, task_data.priority)
    return await asyncio.to_thread(
        create_task_db,
        str(uuid.uuid4()),
        task_data.text,
        category,
        priority,
        owner_id,
        task_data.scheduled_date,
        task_data.scheduled_time,
    )


@app.post("/tasks", status_code=201)
async def create_task(task_data: TaskCreate, session: SessionContext = Depends(get_session)) -> Task:
    return await add_task(task_data, session.user_id)


@app.post("/tasks/categorize")
async def categorize_task(body: CategorizeRequest) -> dict:
    return {"category": await categorize(completer, body.text)}


@app.patch("/tasks/{task_id}")
def update_task(task_id: str, task_data: TaskUpdate) -> Task:
    # Explicit nulls only clear the schedule; text/completed/category/priority can't be unset
    updates = {
        field: value
        for field, value in task_data.model_dump(exclude_unset=True).items()
        if value is not None or field in ("scheduled_date", "scheduled_time")
    }
    try:
        return update_task_db(task_id, **updates)
    except TaskNotFoundError:
        raise HTTPException(status_code=404, detail="Task not found")


@app.delete("/tasks/{task_id}")
def delete_task(task_id: str) -> dict:
    try:
        delete_task_db(task_id)
    except TaskNotFoundError:
        raise HTTPException(status_code=404, detail="Task not found")
    return {"status": "deleted"}


@app.get("/suggestions")
async def get_suggestions(session: SessionContext = Depends(get_session)) -> dict:
    tasks = await asyncio.to_thread(get_all_tasks, session.user_id)
    return {"suggestions": await generate_suggestions(completer, tasks)}


@app.post("/breakdown")
async def breakdown(body: BreakdownRequest) -> dict:
    return {"items": await generate_breakdown(completer, body.text)}


def _draft_view(draft: DraftBreakdown) -> dict:
    return {"text": draft.text, "items": draft.items, "pending": draft.pending}


def _prune_drafts(keep: str) -> None:
    idle = [key for key, draft in drafts.items() if key != keep and not draft.pending]
    for key in idle[:max(0, len(drafts) - MAX_IDLE_DRAFTS)]:
        del drafts[key]


@app.post("/breakdown/draft")
async def submit_draft(body: BreakdownDraftRequest, session: SessionContext = Depends(get_session)) -> dict:
    """Feed the text currently being typed; the preview refreshes once typing pauses."""
    key = session.user_id or ""
    draft = drafts.pop(key, None)
    if draft is None:
        draft = DraftBreakdown(lambda text: generate_breakdown(completer, text), delay_s=BREAKDOWN_DEBOUNCE_S)
    drafts[key] = draft
    draft.submit(body.text)
    _prune_drafts(key)
    return _draft_view(draft)


@app.get("/breakdown/draft")
def get_draft(session: SessionContext = Depends(get_session)) -> dict:
    draft = drafts.get(session.user_id or "")
    if draft is None:
        return {"text": "", "items": [], "pending": False}
    return _draft_view(draft)


@app.post("/schedule")
async def schedule(body: ScheduleRequest) -> dict:
    items = await generate_schedule(completer, body.description, body.days)
    return {"items": [item.model_dump() for item in items]}


def _prune_runs() -> None:
    finished = [
        run_id for run_id, run in apply_runs.items()
        if run.state in (RunState.COMPLETED, RunState.ABORTED)
    ]
    for run_id in finished[:max(0, len(finished) - MAX_FINISHED_RUNS)]:
        del apply_runs[run_id]


async def _launch(run: ApplySequence, wait: bool, response: Response) -> ApplyRunStatus:
    """Register and start a run; at most one unfinished run per owner."""
    busy = any(
        other.owner_id == run.owner_id and other.state in (RunState.IDLE, RunState.RUNNING)
        for other in apply_runs.values()
    )
    if busy:
        raise HTTPException(status_code=409, detail="Another apply run is still in progress")

    _prune_runs()
    apply_runs[run.run_id] = run

    if wait:
        await run.run()
        return run.status()

    task = asyncio.create_task(run.run())
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
    response.status_code = 202
    return run.status()


@app.post("/schedule/apply")
async def apply_schedule(
    body: ScheduleApplyRequest,
    response: Response,
    wait: bool = False,
    session: SessionContext = Depends(get_session),
) -> ApplyRunStatus:
    owner_id = session.user_id

    async def commit(item: ScheduleItem) -> Task:
        return await add_task(
            TaskCreate(
                text=item.title,
                scheduled_date=body.start_date + timedelta(days=item.day - 1),
                scheduled_time=item.time,
            ),
            owner_id,
        )

    run = ApplySequence(
        body.items,
        commit,
        pacing_s=SCHEDULE_APPLY_PACING_S,
        completion_pause_s=SCHEDULE_APPLY_COMPLETION_PAUSE_S,
        owner_id=owner_id,
    )
    return await _launch(run, wait, response)


@app.post("/breakdown/apply")
async def apply_breakdown(
    body: BreakdownApplyRequest,
    response: Response,
    wait: bool = False,
    session: SessionContext = Depends(get_session),
) -> ApplyRunStatus:
    owner_id = session.user_id

    async def commit(item: str) -> Task:
        return await add_task(TaskCreate(text=item, category=body.category), owner_id)

    run = ApplySequence(
        body.items,
        commit,
        pacing_s=BREAKDOWN_APPLY_PACING_S,
        completion_pause_s=BREAKDOWN_APPLY_COMPLETION_PAUSE_S,
        owner_id=owner_id,
    )
    return await _launch(run, wait, response)


@app.get("/apply-runs/{run_id}")
def get_apply_run(run_id: str) -> ApplyRunStatus:
    run = apply_runs.get(run_id)
    if run is None:
        raise HTTPException(status_code=404, detail="Apply run not found")
    return run.status()


@app.delete("/apply-runs/{run_id}")
def close_apply_run(run_id: str) -> ApplyRunStatus:
    run = apply_runs.get(run_id)
    if run is None:
        raise HTTPException(status_code=404, detail="Apply run not found")
    run.close()
    return run.status()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
