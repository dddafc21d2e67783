from propsmodel import PropsModel, ValidationError

# ------------------------------------------------------------------------------------------------

print()
print("=" * 100)
print("Defining properties")
print("-" * 100)
print()

model = PropsModel()

# Every change is published on "<name>-changed" with (name, new_value, old_value).
log_change = lambda name, new, old: print(f"{name} changed: {old!r} -> {new!r}")
model.event_bus.on("name-changed", log_change)

# Defining a property counts as a change from None.
model.define_prop("name", "Alice")
model.set("name", "Smith")

# ------------------------------------------------------------------------------------------------

print()
print("=" * 100)
print("Validating writes")
print("-" * 100)
print()


def check_age(new_age, old_age):
    if not 0 <= new_age <= 150:
        raise ValidationError(f"Not a plausible age: {new_age}")


model.define_prop("age", 30, check_age)

try:
    model.set("age", 200)
except ValidationError as e:
    print(f"Rejected: {e}")

print(f"Age is still {model.get('age')}")

# ------------------------------------------------------------------------------------------------

print()
print("=" * 100)
print("Derived properties")
print("-" * 100)
print()

model.define_derived_prop(
    "greeting", ["name", "age"], lambda name, age: f"{name} is {age} years old"
)
model.event_bus.on("greeting-changed", log_change)

# Setting several properties at once validates all of them before changing any.
model.set({"name": "Charlie", "age": 31})

# ------------------------------------------------------------------------------------------------

print()
print("=" * 100)
print("Change handlers")
print("-" * 100)
print()

# Change handlers get the current values of all the properties they respond to.
model.create_change_handler(
    ["name", "age"], lambda name, age: print(f"Name: {name}, Age: {age}")
)
model.set("age", 32)

# ------------------------------------------------------------------------------------------------

print()
print("=" * 100)
print("Public and private access")
print("-" * 100)
print()

model.define_prop("_password", "hunter2")

public = model.get_standard_public_api()
private = model.get_standard_private_api()

print(f"Public snapshot:  {public.to_json()}")
print(f"Private snapshot: {private.to_json()}")

for api, prop_name in [(public, "_password"), (private, "greeting")]:
    try:
        api.set(prop_name, "nope")
    except Exception as e:
        print(f"Refused: {e}")

# ------------------------------------------------------------------------------------------------

print()
print("=" * 100)
print("Accessors")
print("-" * 100)
print()


class Person:
    pass


person = Person()
public.install_accessors(person, {"name": "readwrite", "greeting": "readonly"})
person.setName("Dana")
print(person.getGreeting())
