# talentpulse/main.py

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from talentpulse.api import churn_routes

app = FastAPI(title="TalentPulse API", version="1.0.0")

origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(churn_routes.router)

@app.get("/")
def health_check():
    return {"status": "online", "message": "TalentPulse Churn Scorer is Running"}
