import os
import random
from datetime import datetime, timedelta

from memtable import Table
from memtable.interop import write_csv

if not os.path.exists("data"):
    os.mkdir("data")

if not os.path.exists("data/shops.csv"):
  cities = ["Rome", "Milan", "Naples", "Turin", "Palermo", "Genoa", "Bologna", "Florence", "Bari", "Catania"]
  shops = []
  for city in cities:
    for i in range(10):
      shops.append([city, f"Shop {i+1} in {city}", random.randint(1, 20)])

  write_csv(Table.from_rows(shops, names=["City", "Shop Name", "Employees"]), "data/shops.csv")

if not os.path.exists("data/sales.csv"):
  products = ["Dress", "Car", "Videogame", "Laptop", "TV"]
  sales = []
  start_date = datetime(2023, 1, 1)
  end_date = datetime.now()

  for i in range(1000):
    product = random.choice(products)
    quantity = random.randint(1, 10)
    price = round(random.uniform(10, 100), 2)
    random_date = start_date + timedelta(days=random.randint(0, (end_date - start_date).days))
    timestamp = random_date.strftime("%Y-%m-%d %H:%M:%S")
    sales.append({"Product": product, "Quantity": quantity, "Price": price, "Timestamp": timestamp})

  write_csv(Table.from_records(sales), "data/sales.csv")
