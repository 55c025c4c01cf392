from decimal import Decimal

from pastelaria.database import SessionLocal, engine
# Importamos tudo de pastelaria.models (o __init__.py registra todas as tabelas)
from pastelaria.models import Base, Product, Role, User
from pastelaria.security import get_password_hash


def init_db():
    print("--- Criando Tabelas ---")
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()

    print("--- Iniciando Carga ---")

    # 1. USUÁRIOS
    users_to_create = [
        ("admin", "1234", Role.ADMIN, "Administrador"),
        ("caixa1", "0000", Role.EMPLOYEE, "Caixa Manhã"),
        ("caixa2", "1111", Role.EMPLOYEE, "Caixa Noite"),
        ("cozinha", "2222", Role.EMPLOYEE, "Cozinha"),
    ]

    for uname, pin, role, full_name in users_to_create:
        if not db.query(User).filter(User.username == uname).first():
            user = User(
                username=uname,
                password_hash=get_password_hash(pin),
                role=role,
                full_name=full_name,
            )
            db.add(user)
            print(f"✅ Usuário '{uname}' criado.")

    db.commit()

    # 2. CARDÁPIO
    products_list = [
        ("Pastel de Carne", "pastel", "9.00"),
        ("Pastel de Queijo", "pastel", "8.50"),
        ("Pastel de Frango c/ Catupiry", "pastel", "10.00"),
        ("Pastel de Pizza", "pastel", "9.50"),
        ("Caldo de Cana 500ml", "bebida", "7.00"),
        ("Refrigerante Lata", "bebida", "6.00"),
        ("Água Mineral", "bebida", "3.50"),
    ]

    count = 0
    for name, category, price in products_list:
        if not db.query(Product).filter(Product.name == name).first():
            db.add(Product(name=name, category=category, price=Decimal(price), is_active=True))
            count += 1

    db.commit()
    print(f"✅ {count} Produtos criados.")
    db.close()


if __name__ == "__main__":
    init_db()
