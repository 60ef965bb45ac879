"""
Tests for MailService against a real (SQLite) database.

Covers folder listing, ownership checks, read-on-view and the send defaults.
"""

import pytest

from app.core.exceptions import Forbidden, InvalidFolder, InvalidStatus, NotFound
from app.models.email import Email, EmailStatus, Folder
from app.models.user import User
from app.modules.mail.service import MailService, parse_folder, parse_status


@pytest.fixture
async def users(db_session):
    alice = User(username="alice", email="alice@example.com", password_hash="x.y")
    bob = User(username="bob", email="bob@example.com", password_hash="x.y")
    db_session.add_all([alice, bob])
    await db_session.commit()
    return alice, bob


@pytest.fixture
def mail(db_session):
    return MailService(db_session)


class TestParsing:

    def test_known_folders(self):
        for name in ("inbox", "sent", "archived", "trash", "starred"):
            assert parse_folder(name).value == name

    def test_unknown_folder(self):
        with pytest.raises(InvalidFolder):
            parse_folder("spam")

    def test_starred_is_not_a_status(self):
        assert Folder.STARRED.status is None
        with pytest.raises(InvalidStatus):
            parse_status("starred")

    def test_status_is_case_sensitive(self):
        with pytest.raises(InvalidStatus):
            parse_status("INBOX")


class TestSend:

    async def test_defaults(self, mail, users):
        alice, _ = users

        email = await mail.send(alice, "bob@example.com", "Hi", "Hello Bob")

        assert email.id is not None
        assert email.status == EmailStatus.INBOX
        assert email.read is False
        assert email.starred is False
        assert email.created_at is not None

    async def test_sender_comes_from_user(self, mail, users):
        alice, _ = users

        email = await mail.send(alice, "bob@example.com", "Hi", "Hello Bob")

        assert email.user_id == alice.id
        assert email.from_email == "alice@example.com"
        assert email.from_name == "alice"

    async def test_explicit_status(self, mail, users):
        alice, _ = users

        email = await mail.send(alice, "bob@example.com", "Hi", "Hello", status="sent")

        assert email.status == EmailStatus.SENT
        assert [e.id for e in await mail.list_folder(alice, "sent")] == [email.id]

    async def test_invalid_status(self, mail, users):
        alice, _ = users

        with pytest.raises(InvalidStatus):
            await mail.send(alice, "bob@example.com", "Hi", "Hello", status="starred")


class TestListFolder:

    async def test_only_own_emails(self, mail, users):
        alice, bob = users
        mine = await mail.send(alice, "x@example.com", "Mine", "body")
        await mail.send(bob, "y@example.com", "Theirs", "body")

        inbox = await mail.list_folder(alice, "inbox")

        assert [e.id for e in inbox] == [mine.id]

    async def test_newest_first(self, mail, users):
        alice, _ = users
        first = await mail.send(alice, "x@example.com", "First", "body")
        second = await mail.send(alice, "x@example.com", "Second", "body")
        third = await mail.send(alice, "x@example.com", "Third", "body")

        inbox = await mail.list_folder(alice, Folder.INBOX)

        assert [e.id for e in inbox] == [third.id, second.id, first.id]

    async def test_status_folders_are_exact(self, mail, users):
        alice, _ = users
        email = await mail.send(alice, "x@example.com", "Subject", "body")
        await mail.set_status(alice, email.id, "archived")

        assert await mail.list_folder(alice, "inbox") == []
        assert [e.id for e in await mail.list_folder(alice, "archived")] == [email.id]

    async def test_starred_spans_statuses(self, mail, users):
        alice, _ = users
        in_inbox = await mail.send(alice, "x@example.com", "A", "body")
        in_trash = await mail.send(alice, "x@example.com", "B", "body", status="trash")
        await mail.send(alice, "x@example.com", "C", "body")
        await mail.set_starred(alice, in_inbox.id, True)
        await mail.set_starred(alice, in_trash.id, True)

        starred = await mail.list_folder(alice, "starred")

        assert {e.id for e in starred} == {in_inbox.id, in_trash.id}

    async def test_unknown_folder(self, mail, users):
        alice, _ = users
        with pytest.raises(InvalidFolder):
            await mail.list_folder(alice, "drafts")


class TestOwnership:

    @pytest.fixture
    async def bobs_email(self, mail, users):
        _, bob = users
        return await mail.send(bob, "alice@example.com", "Private", "for bob only")

    async def test_view_forbidden(self, mail, users, bobs_email):
        alice, _ = users
        with pytest.raises(Forbidden):
            await mail.get_by_id(alice, bobs_email.id)

    async def test_view_does_not_mark_read_when_forbidden(self, mail, users, bobs_email, db_session):
        alice, _ = users
        with pytest.raises(Forbidden):
            await mail.get_by_id(alice, bobs_email.id)

        await db_session.refresh(bobs_email)
        assert bobs_email.read is False

    @pytest.mark.parametrize(
        "operation, args",
        [
            ("set_status", ("archived",)),
            ("set_read", (True,)),
            ("set_starred", (True,)),
            ("delete", ()),
        ],
    )
    async def test_mutations_forbidden(self, mail, users, bobs_email, db_session, operation, args):
        alice, _ = users

        with pytest.raises(Forbidden):
            await getattr(mail, operation)(alice, bobs_email.id, *args)

        await db_session.refresh(bobs_email)
        assert bobs_email.status == EmailStatus.INBOX
        assert bobs_email.read is False
        assert bobs_email.starred is False

    async def test_missing_email(self, mail, users):
        alice, _ = users
        with pytest.raises(NotFound):
            await mail.get_by_id(alice, 99999)

    @pytest.mark.parametrize("email_id", [0, -1, 2**31, 10**20])
    async def test_out_of_range_id_not_found(self, mail, users, email_id):
        alice, _ = users
        with pytest.raises(NotFound):
            await mail.delete(alice, email_id)


class TestStateChanges:

    async def test_view_marks_read(self, mail, users):
        alice, _ = users
        email = await mail.send(alice, "x@example.com", "S", "body")

        viewed = await mail.get_by_id(alice, email.id)

        assert viewed.read is True

    async def test_read_toggle(self, mail, users):
        alice, _ = users
        email = await mail.send(alice, "x@example.com", "S", "body")

        assert (await mail.set_read(alice, email.id, True)).read is True
        assert (await mail.set_read(alice, email.id, False)).read is False

    async def test_archive_and_restore(self, mail, users):
        alice, _ = users
        email = await mail.send(alice, "x@example.com", "S", "body")

        await mail.set_status(alice, email.id, "archived")
        await mail.set_status(alice, email.id, "inbox")

        assert [e.id for e in await mail.list_folder(alice, "inbox")] == [email.id]
        assert await mail.list_folder(alice, "archived") == []

    async def test_delete_removes_row(self, mail, users, db_session):
        alice, _ = users
        email = await mail.send(alice, "x@example.com", "S", "body")
        email_id = email.id

        await mail.delete(alice, email_id)

        assert await db_session.get(Email, email_id) is None
        with pytest.raises(NotFound):
            await mail.get_by_id(alice, email_id)
