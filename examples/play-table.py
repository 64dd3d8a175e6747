from memtable import Not
from memtable.errors import StaleViewError
from memtable.interop import read_csv

shops = read_csv("data/shops.csv")
print(shops.head())

# Shared columns see the changes made to the table, copies don't.
employees = shops.select(columns="Employees", mode="share")
snapshot = shops.select(columns="Employees")
shops.set(0, "Employees", 100)
print(employees[0], snapshot[0])

rome = shops.filter_rows(lambda city: city == "Rome", "City", view=True)
print(rome.view(columns=Not("City")))

shops.append_row({"City": "Rome", "Shop Name": "Shop 11 in Rome", "Employees": 3})
try:
    rome.to_pydict()
except StaleViewError as e:
    print("---")
    print(e)
