"""
Feature: Manage boards from chat
  As a user chatting with the board
  I want to create, rename and delete boards with commands
  So that I never leave the conversation to organise my work

Scenario: Create a board with the default columns
  Given a conversation
  When create_board is dispatched without columns
  Then the board gets Backlog, In Progress, Testing and Done in that order

Scenario: Rename the active board
  Given an active board
  When update_board is dispatched
  Then its name and title both change

Scenario: Delete a board without confirmation
  Given an active board
  When delete_board is dispatched with confirmed false
  Then an unconfirmed error is returned and nothing changes

Scenario: Delete a board with confirmation
  Given an active board with columns and tasks
  When delete_board is dispatched with confirmed true
  Then the board, its columns and its tasks are removed
  And tasks of other boards are kept
"""

import pytest
from sqlmodel import create_engine, Session, SQLModel, select
from models.boards import Board, BoardColumn, Task
from models.conversations import Conversation, ConversationMessage
from operations.contract import PROMPT_VERSION
from operations.dispatcher import dispatch
from operations.errors import ErrorKind
from oracle.base import FunctionCall


@pytest.fixture(name="session")
def session_fixture():
    engine = create_engine("sqlite:///:memory:")
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="conversation")
def conversation_fixture(session):
    conversation = Conversation(topic="Boards")
    session.add(conversation)
    session.commit()
    session.refresh(conversation)
    return conversation


def create_board(session, name, column_titles, task_numbers=()):
    board = Board(name=name, title=name)
    session.add(board)
    session.commit()
    for index, title in enumerate(column_titles):
        session.add(BoardColumn(board_id=board.id, title=title, order=index))
    for case_number in task_numbers:
        session.add(Task(case_number=case_number, title=f"Work {case_number}", status=column_titles[0], board_id=board.id))
    session.commit()
    session.refresh(board)
    return board


def message_count(session, conversation_id):
    return len(session.exec(
        select(ConversationMessage).where(ConversationMessage.conversation_id == conversation_id)
    ).all())


def test_create_board_default_columns(session, conversation):
    # When a board is created without columns
    call = FunctionCall(name="create_board", args={"name": "Roadmap"})
    result = dispatch(session, call, conversation.id, "create a Roadmap board")

    # Then it gets the default four columns in order
    assert result.action == "create_board"
    assert result.board.name == "Roadmap"
    assert result.board.title == "Roadmap"
    assert [column.title for column in result.board.columns] == ["Backlog", "In Progress", "Testing", "Done"]
    assert [column.order for column in result.board.columns] == [0, 1, 2, 3]
    assert result.board.columns[0].helper == "Ideas and items that are not in motion yet."

    # And the board is stored
    board = session.exec(select(Board).where(Board.id == result.board.id)).one()
    columns = session.exec(select(BoardColumn).where(BoardColumn.board_id == board.id)).all()
    assert len(columns) == 4
    assert message_count(session, conversation.id) == 2


def test_create_board_custom_columns(session, conversation):
    call = FunctionCall(
        name="create_board",
        args={"name": "Hiring", "columns": [{"title": "Applied"}, {"title": "Interview", "helper": "On site"}]}
    )

    result = dispatch(session, call, conversation.id, "hiring board with applied and interview")

    assert [column.title for column in result.board.columns] == ["Applied", "Interview"]
    assert result.board.columns[1].helper == "On site"
    assert result.to_payload()["board"]["columns"][0]["order"] == 0


def test_create_board_ignores_active_board(session, conversation):
    active = create_board(session, "Current", ["Todo"])

    result = dispatch(session, FunctionCall(name="create_board", args={"name": "Other"}), conversation.id, "new", active.id)

    assert result.board.id != active.id
    assert len(session.exec(select(Board)).all()) == 2


def test_update_board(session, conversation):
    # Given an active board
    board = create_board(session, "Product", ["Todo"])

    # When it is renamed
    call = FunctionCall(name="update_board", args={"name": "Product v2"})
    result = dispatch(session, call, conversation.id, "rename board", board.id)

    # Then name and title follow
    assert result.action == "update_board"
    session.refresh(board)
    assert board.name == "Product v2"
    assert board.title == "Product v2"
    assert [column.title for column in result.board.columns] == ["Todo"]

    # And the exchange is recorded as one USER/ASSISTANT pair
    messages = session.exec(
        select(ConversationMessage)
        .where(ConversationMessage.conversation_id == conversation.id)
        .order_by(ConversationMessage.sequence)
    ).all()
    assert len(messages) == 2
    assert messages[0].meta_data == {"type": "update-board-request", "promptVersion": PROMPT_VERSION}
    assert messages[1].meta_data["promptVersion"] == PROMPT_VERSION


def test_update_board_without_active_board(session, conversation):
    result = dispatch(session, FunctionCall(name="update_board", args={"name": "X"}), conversation.id, "rename")

    assert result.kind == ErrorKind.NOT_FOUND
    assert result.message == "No active board to update."
    assert message_count(session, conversation.id) == 0


def test_delete_board_unconfirmed(session, conversation):
    # Given an active board with a task
    board = create_board(session, "Product", ["Todo"], ["TASK-1"])

    # When deletion is proposed without confirmation
    call = FunctionCall(name="delete_board", args={"confirmed": False})
    result = dispatch(session, call, conversation.id, "delete this board", board.id)

    # Then nothing is deleted
    assert result.kind == ErrorKind.UNCONFIRMED
    assert session.exec(select(Board)).all() != []
    assert len(session.exec(select(Task)).all()) == 1
    assert message_count(session, conversation.id) == 0


def test_delete_board_unconfirmed_before_conversation_lookup(session):
    # Given a conversation id that does not exist
    board = create_board(session, "Product", ["Todo"], ["TASK-1"])

    # When deletion is proposed without confirmation
    call = FunctionCall(name="delete_board", args={"confirmed": False})
    result = dispatch(session, call, "conversation_missing", "delete this board", board.id)

    # Then the missing confirmation is reported, not the missing conversation
    assert result.kind == ErrorKind.UNCONFIRMED
    assert len(session.exec(select(Task)).all()) == 1


def test_delete_board_cascades(session, conversation):
    # Given two boards with columns and tasks
    doomed = create_board(session, "Doomed", ["Todo", "Done"], ["TASK-1", "TASK-2"])
    kept = create_board(session, "Kept", ["Todo"], ["TASK-3"])
    doomed_id = doomed.id

    # When the first one is deleted with confirmation
    call = FunctionCall(name="delete_board", args={"confirmed": True})
    result = dispatch(session, call, conversation.id, "yes, delete it", doomed_id)

    # Then its columns and tasks are gone
    assert result.action == "delete_board"
    assert result.board_id == doomed_id
    assert session.exec(select(Board).where(Board.id == doomed_id)).first() is None
    assert session.exec(select(BoardColumn).where(BoardColumn.board_id == doomed_id)).all() == []
    assert session.exec(select(Task).where(Task.board_id == doomed_id)).all() == []

    # And the other board is untouched
    assert session.exec(select(Task.case_number).where(Task.board_id == kept.id)).all() == ["TASK-3"]
    assert message_count(session, conversation.id) == 2
