def run(Name: str):
    return Name
