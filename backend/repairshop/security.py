"""
Repair Shop Backend — Password Hashing
=======================================

What:  Salted password hashing for employee accounts.
How:   passlib CryptContext with pbkdf2_sha256; each hash string embeds its
       own salt and round count, so verification needs nothing else.
Who:   EmployeeService hashes on registration. Read endpoints never return
       the stored hash.
"""

from passlib.context import CryptContext

pwd_context = CryptContext(
    schemes=["pbkdf2_sha256"],
    deprecated="auto",
)


def hash_password(plain_password: str) -> str:
    return pwd_context.hash(plain_password)
