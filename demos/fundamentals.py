"""
fundamentals.py — Encapsulation, Inheritance and Polymorphism
"""

from abc import ABC, abstractmethod
from typing import List


# --- Encapsulation ---
class AccountFrozen(Exception):
    pass


class BankAccount:
    """Keeps its balance private and only changes it through validated operations."""

    def __init__(self, account_number: str, owner: str, initial_deposit: float = 0.0):
        self._account_number = account_number
        self._owner = owner
        self._balance = initial_deposit
        self._frozen = False

    @property
    def account_number(self) -> str:
        return self._account_number

    @property
    def owner(self) -> str:
        return self._owner

    @property
    def balance(self) -> float:
        return self._balance

    @property
    def frozen(self) -> bool:
        return self._frozen

    def deposit(self, amount: float) -> float:
        self._check_open()
        if amount <= 0:
            raise ValueError("Deposit amount must be positive")
        self._balance += amount
        return self._balance

    def withdraw(self, amount: float) -> float:
        self._check_open()
        if amount <= 0:
            raise ValueError("Withdrawal amount must be positive")
        if amount > self._balance:
            raise ValueError("Insufficient funds")
        self._balance -= amount
        return self._balance

    def freeze(self):
        self._frozen = True

    def unfreeze(self):
        self._frozen = False

    def _check_open(self):
        if self._frozen:
            raise AccountFrozen("Account is frozen")

    def __str__(self):
        suffix = " (FROZEN)" if self._frozen else ""
        return f"Account[{self._account_number}] owned by {self._owner} with balance: ${self._balance:.2f}{suffix}"


# --- Inheritance ---
class Vehicle:

    def __init__(self, brand: str, model: str, year: int):
        self.brand = brand
        self.model = model
        self.year = year
        self.running = False

    def start(self) -> str:
        self.running = True
        return f"{self.brand} {self.model} started"

    def stop(self) -> str:
        self.running = False
        return f"{self.brand} {self.model} stopped"

    def describe(self) -> str:
        return f"{self.year} {self.brand} {self.model}"


class Car(Vehicle):

    def __init__(self, brand: str, model: str, year: int, doors: int = 4):
        super().__init__(brand, model, year)
        self.doors = doors

    def describe(self) -> str:
        return f"{super().describe()} with {self.doors} doors"

    def honk(self) -> str:
        return "Beep beep!"


class Motorcycle(Vehicle):

    def __init__(self, brand: str, model: str, year: int, has_sidecar: bool = False):
        super().__init__(brand, model, year)
        self.has_sidecar = has_sidecar

    def describe(self) -> str:
        sidecar = "with" if self.has_sidecar else "without"
        return f"{super().describe()} {sidecar} sidecar"

    def wheelie(self) -> str:
        if not self.running:
            return "Start the engine first"
        return "Doing a wheelie!"


# --- Polymorphism ---
class PaymentProcessor(ABC):
    name = "payment"

    @abstractmethod
    def fee(self, amount: float) -> float:
        ...

    def process(self, amount: float) -> str:
        return f"Processed {amount:.2f} via {self.name} (fee {self.fee(amount):.2f})"


class CreditCardProcessor(PaymentProcessor):
    name = "credit card"

    def fee(self, amount: float) -> float:
        return round(amount * 0.029 + 0.30, 2)


class PayPalProcessor(PaymentProcessor):
    name = "PayPal"

    def fee(self, amount: float) -> float:
        return round(amount * 0.034 + 0.35, 2)


class CryptoProcessor(PaymentProcessor):
    name = "crypto"

    def fee(self, amount: float) -> float:
        return round(amount * 0.01, 2)


def process_all(processors: List[PaymentProcessor], amount: float) -> List[str]:
    return [processor.process(amount) for processor in processors]


def main():
    print("=== Encapsulation ===")
    account = BankAccount("12345", "John Doe", 1000.0)
    print(f"Initial account: {account}")
    print(f"Deposited 500, balance {account.deposit(500.0):.2f}")
    print(f"Withdrew 200, balance {account.withdraw(200.0):.2f}")
    try:
        account.withdraw(2000.0)
    except ValueError as e:
        print(f"Protected operation: {e}")
    account.freeze()
    try:
        account.deposit(100.0)
    except AccountFrozen as e:
        print(f"Protected operation: {e}")
    account.unfreeze()
    account.deposit(100.0)
    print(f"Final account: {account}")

    print("\n=== Inheritance ===")
    car = Car("Toyota", "Corolla", 2022)
    bike = Motorcycle("Ducati", "Monster", 2021)
    for vehicle in (Vehicle("Generic", "Cart", 2020), car, bike):
        print(vehicle.describe())
    print(car.start(), "-", car.honk())
    print(bike.wheelie())
    print(bike.start(), "-", bike.wheelie())

    print("\n=== Polymorphism ===")
    for line in process_all([CreditCardProcessor(), PayPalProcessor(), CryptoProcessor()], 100.0):
        print(line)


if __name__ == '__main__':
    main()
