"""
================================================================================
IDENTITY STORE - User Accounts, Credentials and Roles
================================================================================

The narrow identity interface the web layer depends on. Storage is delegated
to an ApplicationDatabase instance held by composition; callers never touch
the identity tables directly.

Operations:
    find_user(user_name)                      -> IdentityUser | None
    validate_credentials(user_name, password) -> bool
    create_user(user_name, password, ...)     -> IdentityUser
    change_password(user_name, current, new)  -> None
    add_to_role(user_name, role)              -> None
    get_roles(user_name)                      -> tuple[str, ...]
    user_count()                              -> int

Security:
    - Passwords hashed with bcrypt (cost factor BCRYPT_COST_FACTOR)
    - User names matched case-insensitively (normalized upper-case key)
    - validate_credentials hashes a dummy password for unknown users so the
      response time does not reveal whether an account exists

Last Modified: October 2026
================================================================================
"""

import sqlite3
from datetime import datetime, timezone

import bcrypt

from hostinfo.core.exceptions import InvalidCredentialsError, NotFoundError, UserExistsError
from hostinfo.core.models import IdentityUser
from hostinfo.utils.constants import BCRYPT_COST_FACTOR
from hostinfo.utils.logger import logger


def _normalize(name):
    return (name or '').strip().upper()


def hash_password(password, rounds=BCRYPT_COST_FACTOR):
    return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt(rounds)).decode('utf-8')


def verify_password_hash(password, password_hash):
    return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))


class IdentityStore:
    """
    User and role management backed by an ApplicationDatabase.

    Args:
        database: ApplicationDatabase holding the identity schema
        hash_rounds: bcrypt cost factor for new hashes
    """

    def __init__(self, database, hash_rounds=BCRYPT_COST_FACTOR):
        self.database = database
        self.hash_rounds = hash_rounds
        self._dummy_hash = None

    def _load_user(self, conn, user_name):
        row = conn.execute(
            'SELECT * FROM users WHERE normalized_user_name = ?',
            (_normalize(user_name),)
        ).fetchone()
        if row is None:
            return None
        roles = conn.execute(
            '''SELECT r.name FROM roles r
               JOIN user_roles ur ON ur.role_id = r.id
               WHERE ur.user_id = ? ORDER BY r.name''',
            (row['id'],)
        ).fetchall()
        return IdentityUser(
            id=row['id'],
            user_name=row['user_name'],
            password_hash=row['password_hash'],
            email=row['email'],
            created_at=row['created_at'],
            roles=tuple(r['name'] for r in roles),
        )

    def find_user(self, user_name):
        """Look up a user by name; returns None when there is no such user."""
        if not user_name:
            return None
        return self.database.execute(lambda conn: self._load_user(conn, user_name))

    def validate_credentials(self, user_name, password):
        """Verify user name and password - timing-attack resistant."""
        user = self.find_user(user_name) if isinstance(user_name, str) else None
        if user is None or not isinstance(password, str):
            # Same bcrypt cost as a real check so unknown users are not faster
            if self._dummy_hash is None:
                self._dummy_hash = hash_password('dummy', self.hash_rounds)
            verify_password_hash(password if isinstance(password, str) else '', self._dummy_hash)
            return False
        return verify_password_hash(password, user.password_hash)

    def create_user(self, user_name, password, email=None, roles=(), first_user_roles=()):
        """
        Register a new user.

        Args:
            roles: Roles granted to the new user
            first_user_roles: Extra roles granted only when no user exists yet;
                the check and the insert share one write transaction

        Raises:
            UserExistsError: a user with the same name (ignoring case) exists
        """
        user_name = user_name.strip()
        password_hash = hash_password(password, self.hash_rounds)
        created_at = datetime.now(timezone.utc).isoformat()

        def _insert(conn):
            granted = tuple(roles)
            if first_user_roles:
                # Take the write lock before counting so concurrent first
                # registrations cannot both see an empty table
                if not conn.in_transaction:
                    conn.execute('BEGIN IMMEDIATE')
                if conn.execute('SELECT COUNT(*) FROM users').fetchone()[0] == 0:
                    granted += tuple(r for r in first_user_roles if r not in granted)
            try:
                conn.execute(
                    '''INSERT INTO users (user_name, normalized_user_name, email, password_hash, created_at)
                       VALUES (?, ?, ?, ?, ?)''',
                    (user_name, _normalize(user_name), email, password_hash, created_at)
                )
            except sqlite3.IntegrityError as e:
                raise UserExistsError(f"User '{user_name}' already exists") from e
            for role in granted:
                self._add_to_role(conn, user_name, role)
            return self._load_user(conn, user_name)

        user = self.database.execute(_insert)
        logger.info(f"Created user {user.user_name} (roles: {', '.join(user.roles) or 'none'})")
        return user

    def change_password(self, user_name, current_password, new_password):
        """
        Replace a user's password after verifying the current one.

        Raises:
            NotFoundError: no such user
            InvalidCredentialsError: current_password is wrong
        """
        user = self.find_user(user_name)
        if user is None:
            raise NotFoundError('User', user_name)
        if not verify_password_hash(current_password, user.password_hash):
            raise InvalidCredentialsError('Current password is incorrect')

        new_hash = hash_password(new_password, self.hash_rounds)
        self.database.execute(lambda conn: conn.execute(
            'UPDATE users SET password_hash = ? WHERE id = ?', (new_hash, user.id)
        ))

    def _add_to_role(self, conn, user_name, role):
        user = conn.execute(
            'SELECT id FROM users WHERE normalized_user_name = ?', (_normalize(user_name),)
        ).fetchone()
        if user is None:
            raise NotFoundError('User', user_name)
        conn.execute(
            'INSERT OR IGNORE INTO roles (name, normalized_name) VALUES (?, ?)',
            (role, _normalize(role))
        )
        role_row = conn.execute(
            'SELECT id FROM roles WHERE normalized_name = ?', (_normalize(role),)
        ).fetchone()
        conn.execute(
            'INSERT OR IGNORE INTO user_roles (user_id, role_id) VALUES (?, ?)',
            (user['id'], role_row['id'])
        )

    def add_to_role(self, user_name, role):
        """Grant role to user, creating the role on first use."""
        self.database.execute(lambda conn: self._add_to_role(conn, user_name, role))

    def get_roles(self, user_name):
        user = self.find_user(user_name)
        if user is None:
            raise NotFoundError('User', user_name)
        return user.roles

    def user_count(self):
        return self.database.execute(
            lambda conn: conn.execute('SELECT COUNT(*) FROM users').fetchone()[0]
        )
